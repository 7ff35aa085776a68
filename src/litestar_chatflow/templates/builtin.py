"""Built-in workflow templates.

The catalogue consists of the selection template (:data:`BASE_TEMPLATE`), which asks the
user which workflow to run, and a set of asset workflows. Each asset workflow
collects information, generates the asset and loops on review until the user
approves it. Finished asset workflows chain silently back to the selection
template so the thread always has an entry point.
"""

from __future__ import annotations

from litestar_chatflow.core.definition import StepConfig, StepDefinition, WorkflowTemplate
from litestar_chatflow.core.types import StepType, TemplateKey

__all__ = [
    "BASE_TEMPLATE",
    "BLOG_ARTICLE_TEMPLATE",
    "BUILTIN_TEMPLATES",
    "DUMMY_TEMPLATE",
    "FAQ_TEMPLATE",
    "MEDIA_PITCH_TEMPLATE",
    "PRESS_RELEASE_TEMPLATE",
    "QUICK_PRESS_RELEASE_TEMPLATE",
    "SOCIAL_POST_TEMPLATE",
    "TEST_STEP_TRANSITIONS_TEMPLATE",
    "asset_workflow",
]

SELECTION_OPTIONS = (
    "Press Release",
    "Media Pitch",
    "Social Post",
    "Blog Article",
    "FAQ",
    "Quick Press Release",
    "Test Step Transitions",
    "Dummy Workflow",
)

SELECTION_PROMPT = """Which workflow would you like to use? Please choose from:

**Quick Asset Creation:**
• Press Release - Draft PR announcement materials
• Media Pitch - Build custom outreach with context
• Social Post - Craft social copy in your brand voice
• Blog Article - Create long-form POVs, news, or narratives
• FAQ - Generate frequent questions and suggested responses
• Quick Press Release - Create a press release in just two steps

**Testing & Development:**
• Test Step Transitions - Exercise step transitions and workflow completion
• Dummy Workflow - For testing purposes

Tip: you can also describe what you want to create and I'll recommend the best workflow."""

SELECTION_INSTRUCTIONS = """You are a workflow selection assistant. Match the user's input to one of the
available workflows.

MATCHING RULES:
- "PR", "press release", "announcement materials" -> "Press Release"
- "pitch", "outreach", "journalist outreach" -> "Media Pitch"
- "social", "social media", "brand voice", "linkedin", "twitter" -> "Social Post"
- "blog", "article", "long-form", "POV", "narrative" -> "Blog Article"
- "questions", "FAQ", "Q&A" -> "FAQ"
- "quick", "fast press release", "one message" -> "Quick Press Release"

INTENT DETECTION:
- Cancellation ("nevermind", "stop", "cancel", "quit"): set selectedWorkflow to "cancelled".
- Confusion ("I don't know", "help me decide"): stay incomplete and explain the options.
- General questions that are not a workflow request: complete with selectedWorkflow null and
  put your conversational answer in nextQuestion.

For a clear selection respond with:
{"isComplete": true, "collectedInformation": {"selectedWorkflow": "<EXACT WORKFLOW NAME>"}, "nextQuestion": null}"""

TITLE_INSTRUCTIONS = """Write a short title (at most six words) for this conversation thread.
Respond with the title only, without quotes or punctuation at the end."""

REVIEW_INSTRUCTIONS = """You are reviewing user feedback on a generated {asset_type}.
Decide whether the user approved it or asked for changes. List every requested change as a
separate, specific instruction."""


def _review_prompt(asset_type: str) -> str:
    return (
        f"Here's your generated {asset_type}. Please review it and let me know if you'd like "
        "to make any changes. If you're satisfied, simply reply with 'approved'."
    )


def asset_workflow(
    key: str,
    name: str,
    description: str,
    *,
    asset_type: str,
    collection_prompt: str,
    goal: str,
    instructions: str,
    content_template: str,
    essential: tuple[str, ...],
    important: tuple[str, ...] = (),
    optional: tuple[str, ...] = (),
) -> WorkflowTemplate:
    """Build the standard collect, generate and review workflow for an asset type.

    Args:
        key: Template key.
        name: Display name.
        description: Template description.
        asset_type: Human-readable asset type, for example ``"Press Release"``.
        collection_prompt: First question shown to the user.
        goal: Goal of the information collection step.
        instructions: Base instructions of the information collection step.
        content_template: Writing instructions used to generate the asset.
        essential: Fields required before generation.
        important: Fields that improve the asset.
        optional: Nice-to-have fields.

    Returns:
        The workflow template.
    """
    return WorkflowTemplate(
        key=key,
        name=name,
        description=description,
        next_template=TemplateKey.BASE,
        steps=(
            StepDefinition(
                type=StepType.JSON_DIALOG,
                name="Information Collection",
                description=f"Collect the information needed to write the {asset_type.lower()}",
                prompt=collection_prompt,
                order=0,
                config=StepConfig(
                    goal=goal,
                    base_instructions=instructions,
                    essential=essential,
                    important=important,
                    optional=optional,
                    asset_type=asset_type,
                ),
            ),
            StepDefinition(
                type=StepType.API_CALL,
                name="Asset Generation",
                description=f"Generate the {asset_type.lower()} from the collected information",
                prompt=f"Generating your {asset_type.lower()} now. This may take a moment...",
                order=1,
                dependencies=("Information Collection",),
                config=StepConfig(
                    goal=f"Generate a high-quality {asset_type.lower()} and return the full content.",
                    asset_type=asset_type,
                    templates={asset_type: content_template},
                    auto_execute=True,
                ),
            ),
            StepDefinition(
                type=StepType.JSON_DIALOG,
                name="Asset Review",
                description=f"Review the generated {asset_type.lower()} and request changes",
                prompt=_review_prompt(asset_type.lower()),
                order=2,
                dependencies=("Asset Generation",),
                handler="asset_review",
                config=StepConfig(
                    goal="Determine whether the user approves the asset or wants specific changes.",
                    base_instructions=REVIEW_INSTRUCTIONS.format(asset_type=asset_type.lower()),
                    asset_type=asset_type,
                    templates={asset_type: content_template},
                ),
            ),
        ),
    )


BASE_TEMPLATE = WorkflowTemplate(
    key=TemplateKey.BASE,
    name="Base Workflow",
    description="Select the workflow to run for this thread",
    is_selection=True,
    steps=(
        StepDefinition(
            type=StepType.JSON_DIALOG,
            name="Workflow Selection",
            description="Select the type of workflow to create",
            prompt=SELECTION_PROMPT,
            order=0,
            handler="workflow_selection",
            config=StepConfig(
                goal="Determine which workflow the user wants to run",
                base_instructions=SELECTION_INSTRUCTIONS,
                options=SELECTION_OPTIONS,
                essential=("selectedWorkflow",),
            ),
        ),
        StepDefinition(
            type=StepType.GENERATE_THREAD_TITLE,
            name="Auto Generate Thread Title",
            description="Derive a title for the conversation thread",
            prompt="Generating a title for this conversation...",
            order=1,
            dependencies=("Workflow Selection",),
            config=StepConfig(base_instructions=TITLE_INSTRUCTIONS, auto_execute=True, silent=True),
        ),
    ),
)

PRESS_RELEASE_TEMPLATE = asset_workflow(
    TemplateKey.PRESS_RELEASE,
    "Press Release",
    "Draft PR announcement materials in three steps: information collection, generation and review",
    asset_type="Press Release",
    collection_prompt=(
        "Let's create your press release. Please start by providing your company name, a brief "
        "description of what your company does, and information about what you're announcing."
    ),
    goal="Collect all necessary information to generate a high-quality press release",
    instructions="""You are a friendly PR consultant gathering information for a press release.
Extract ALL relevant information from each message, not just what you asked for. Use earlier
conversation context to fill in details. Auto-fill nice-to-have fields with sensible defaults
("immediate release", "pricing available upon request", a generic CEO quote) and say so.
Ask for the most important missing information first and group related questions.
If the user says "generate", "proceed" or "go ahead", respect it even if optional fields are missing.""",
    content_template="""You are a PR writing assistant. Write a professional press release with:
1. Headline (10-12 words, no launch dates)
2. Subhead (1-2 sentences)
3. Dateline: City, State - Date
4. Lead paragraph (who, what, when, where, why)
5. Industry challenge paragraph and how the announcement addresses it
6. Executive quote, then supporting details and benefits
7. Boilerplate, availability note and media contact
Use each statistic only once.""",
    essential=("companyName", "companyDescription", "announcement"),
    important=("productName", "keyFeatures", "quote"),
    optional=("releaseDate", "pricing", "contactInfo"),
)

MEDIA_PITCH_TEMPLATE = asset_workflow(
    TemplateKey.MEDIA_PITCH,
    "Media Pitch",
    "Build personalized media outreach with context",
    asset_type="Media Pitch",
    collection_prompt=(
        "Let's build your media pitch. What are you announcing, and which publication, "
        "journalist or beat are you pitching?"
    ),
    goal="Collect the story angle and target outlet for a personalized media pitch",
    instructions="""You are a media relations specialist gathering information for a pitch.
Capture the announcement, the news hook, the target journalist or outlet, and why it matters to
their audience. Do not invent journalist names.""",
    content_template="""You are a media relations specialist. Write a concise, personalized pitch email:
a subject line, a one-sentence hook tied to the journalist's beat, two short paragraphs on the
news and why it matters now, and a clear call to action. Keep it under 200 words.""",
    essential=("announcement", "targetOutlet"),
    important=("newsHook", "companyName"),
    optional=("spokesperson", "embargo"),
)

SOCIAL_POST_TEMPLATE = asset_workflow(
    TemplateKey.SOCIAL_POST,
    "Social Post",
    "Craft social copy in your brand voice",
    asset_type="Social Post",
    collection_prompt=(
        "Let's create your social post. Please start by providing your company name, what you're "
        "announcing, and which social media platforms you want to target (LinkedIn, Twitter, "
        "Facebook, Instagram)."
    ),
    goal="Collect the message, platforms and tone for social media content",
    instructions="""You are a social media strategist gathering information for social posts.
Capture the announcement, target platforms, brand voice and any links or hashtags.""",
    content_template="""You are a social media content creator. Write one post per requested platform,
respecting each platform's length conventions, in the brand voice provided. Add relevant
hashtags and a call to action.""",
    essential=("companyName", "announcement", "platforms"),
    important=("tone", "callToAction"),
    optional=("hashtags", "link"),
)

BLOG_ARTICLE_TEMPLATE = asset_workflow(
    TemplateKey.BLOG_ARTICLE,
    "Blog Article",
    "Create long-form POVs, news, or narratives",
    asset_type="Blog Article",
    collection_prompt="Let's write your blog article. What's the topic, and who is the intended audience?",
    goal="Collect the topic, audience and key points for a blog article",
    instructions="""You are a content marketing specialist gathering information for a blog article.
Capture the topic, audience, key points, desired length and tone.""",
    content_template="""You are a content marketing specialist. Write a blog article with a compelling
title, an engaging introduction, three to five sections with subheadings, and a conclusion with a
call to action.""",
    essential=("topic", "audience"),
    important=("keyPoints", "tone"),
    optional=("length", "callToAction"),
)

FAQ_TEMPLATE = asset_workflow(
    TemplateKey.FAQ,
    "FAQ",
    "Generate frequent questions and suggested responses",
    asset_type="FAQ",
    collection_prompt=(
        "Let's create your FAQ document. What product, service or announcement should it cover, "
        "and who will be reading it?"
    ),
    goal="Collect the subject and audience of an FAQ document",
    instructions="""You are a communications specialist gathering information for an FAQ document.
Capture the subject, audience, known customer concerns and any facts the answers must include.""",
    content_template="""You are a communications specialist. Write an FAQ document with eight to twelve
questions grouped by theme. Answers are two to four sentences, factual and consistent with the
provided information.""",
    essential=("subject", "audience"),
    important=("keyFacts", "concerns"),
    optional=("contactInfo",),
)

QUICK_PRESS_RELEASE_TEMPLATE = WorkflowTemplate(
    key=TemplateKey.QUICK_PRESS_RELEASE,
    name="Quick Press Release",
    description="Create a press release in just two steps",
    next_template=TemplateKey.BASE,
    steps=(
        StepDefinition(
            type=StepType.USER_INPUT,
            name="Announcement Details",
            description="Capture everything about the announcement in a single message",
            prompt=(
                "Tell me about your announcement in one message: your company, what you're "
                "announcing, and anything else worth including."
            ),
            order=0,
            config=StepConfig(input_field="announcementDetails"),
        ),
        StepDefinition(
            type=StepType.ASSET_CREATION,
            name="Asset Generation",
            description="Generate the press release from the announcement details",
            prompt="Generating your press release now. This may take a moment...",
            order=1,
            dependencies=("Announcement Details",),
            config=StepConfig(
                asset_type="Press Release",
                templates={"Press Release": PRESS_RELEASE_TEMPLATE.steps[1].config.templates["Press Release"]},
                auto_execute=True,
            ),
        ),
    ),
)


def _transition_step(number: int, running_total: int) -> StepDefinition:
    prompt = f"This is STEP {number}. Previous inputs sum: {running_total}. Please enter the number '{number}' to "
    prompt += "complete the workflow." if number == 4 else "continue."
    return StepDefinition(
        type=StepType.JSON_DIALOG,
        name=f"Step {number}",
        description=f"Test step {number}",
        prompt=prompt,
        order=number - 1,
        dependencies=(f"Step {number - 1}",) if number > 1 else (),
        config=StepConfig(
            goal=f"Collect the number {number}",
            base_instructions=(
                f"The step is complete when the user enters the number {number}. "
                f'Store it as collectedInformation.step{number}.'
            ),
            essential=(f"step{number}",),
        ),
    )


TEST_STEP_TRANSITIONS_TEMPLATE = WorkflowTemplate(
    key=TemplateKey.TEST_STEP_TRANSITIONS,
    name="Test Step Transitions",
    description="Four chained steps for exercising transitions and workflow completion",
    next_template=TemplateKey.BASE,
    steps=tuple(_transition_step(number, sum(range(number))) for number in range(1, 5)),
)

DUMMY_TEMPLATE = WorkflowTemplate(
    key=TemplateKey.DUMMY,
    name="Dummy Workflow",
    description="Single-step workflow for testing purposes",
    next_template=TemplateKey.BASE,
    steps=(
        StepDefinition(
            type=StepType.USER_INPUT,
            name="Success Message",
            description="Acknowledge any input",
            prompt="This is a dummy workflow. Send any message to complete it.",
            order=0,
        ),
    ),
)

BUILTIN_TEMPLATES: tuple[WorkflowTemplate, ...] = (
    BASE_TEMPLATE,
    PRESS_RELEASE_TEMPLATE,
    MEDIA_PITCH_TEMPLATE,
    SOCIAL_POST_TEMPLATE,
    BLOG_ARTICLE_TEMPLATE,
    FAQ_TEMPLATE,
    QUICK_PRESS_RELEASE_TEMPLATE,
    TEST_STEP_TRANSITIONS_TEMPLATE,
    DUMMY_TEMPLATE,
)
