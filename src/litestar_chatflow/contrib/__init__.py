"""Optional integrations with third-party job queues."""
