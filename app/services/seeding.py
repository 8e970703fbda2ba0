"""Demo data: one DPDP module with a scenario tree and a linked assessment."""
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.module import TrainingModule
from app.schemas.assessment import AssessmentCreateSchema, QuestionInSchema
from app.schemas.module import ModuleCreateSchema
from app.schemas.scenario import NodeInSchema, ScenarioCreateSchema
from app.services.authoring import create_assessment, create_module, create_scenario

logger = logging.getLogger(__name__)

DEMO_MODULE = ModuleCreateSchema(
    title="Consent and Notice under the DPDP Act",
    description="When personal data may be processed and what the Data Principal must be told.",
    dpdp_section="Sections 5-7",
    duration_minutes=20,
    is_mandatory=True,
    objectives=[
        "Recognise valid consent",
        "Know what a notice must contain",
        "Handle withdrawal of consent",
    ],
    content=(
        "## Why consent matters\n"
        "Personal data may only be processed for a lawful purpose with consent or a legitimate use.\n"
        "## What a notice must say\n"
        "The notice lists the personal data collected, the purpose and how to withdraw consent.\n"
        "## Withdrawal\n"
        "Withdrawing consent must be as easy as giving it; processing stops within a reasonable time.\n"
    ),
)

DEMO_SCENARIO_NODES = [
    NodeInSchema(
        key="root",
        node_text="A marketing colleague asks you for the customer export, including phone numbers, "
        "to run a new campaign the customers never signed up for.",
    ),
    NodeInSchema(key="share", parent_key="root", sort_order=0, node_text="Send the export, it is an internal team."),
    NodeInSchema(key="check", parent_key="root", sort_order=1, node_text="Check the consent records first."),
    NodeInSchema(
        key="share_out",
        parent_key="share",
        node_text="The campaign goes out to every customer.",
        is_compliant=False,
        explanation="Data collected for one purpose was reused for another without consent.",
    ),
    NodeInSchema(
        key="check_none",
        parent_key="check",
        sort_order=0,
        node_text="Consent covered order updates only. You decline and suggest an opt-in campaign.",
        is_compliant=True,
        explanation="Processing stays within the purpose the customers consented to.",
    ),
    NodeInSchema(
        key="check_some",
        parent_key="check",
        sort_order=1,
        node_text="Some customers opted in to marketing. You share only their records.",
        is_compliant=True,
        explanation="Only data covered by marketing consent is shared.",
    ),
]

DEMO_QUESTIONS = [
    QuestionInSchema(
        question_text="Which of these is a valid basis for processing personal data?",
        options=["Free, specific, informed consent", "A pre-ticked checkbox", "Silence", "Inactivity"],
        correct_option=0,
        explanation="Consent must be a clear affirmative action.",
    ),
    QuestionInSchema(
        question_text="What must a notice to the Data Principal include?",
        options=["Only the company name", "The data collected and its purpose", "The CEO's phone number", "Nothing"],
        correct_option=1,
    ),
    QuestionInSchema(
        question_text="How easy must withdrawal of consent be?",
        options=["Harder than giving it", "Only in writing", "As easy as giving it", "Not allowed"],
        correct_option=2,
        explanation="Withdrawal must be comparable in ease to giving consent.",
    ),
    QuestionInSchema(
        question_text="Who is the Data Principal?",
        options=["The company", "The regulator", "The processor", "The individual the data relates to"],
        correct_option=3,
    ),
]


async def seed_demo_data(db: AsyncSession) -> None:
    """Create the demo module, scenario and assessment once (no-op when modules exist)."""
    result = await db.execute(select(func.count(TrainingModule.id)))
    if result.scalar():
        return

    module = await create_module(db, DEMO_MODULE)
    await create_scenario(
        db,
        ScenarioCreateSchema(
            title="The marketing export",
            description="A colleague wants customer data for an unplanned campaign.",
            module_id=module.id,
            nodes=DEMO_SCENARIO_NODES,
        ),
    )
    await create_assessment(
        db,
        AssessmentCreateSchema(
            title="Consent and Notice check",
            pass_threshold=70,
            module_id=module.id,
            questions=DEMO_QUESTIONS,
        ),
    )
    logger.info("Demo data seeded")
