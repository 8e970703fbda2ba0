from sqlalchemy import func, select

from app.models.assessment import Assessment
from app.models.module import TrainingModule
from app.models.scenario import Scenario
from app.services.scenario_player import ScenarioPlayer
from app.services.seeding import seed_demo_data
from app.services.store import load_scenario_tree
from app.services.submission import build_engine


async def test_seed_is_playable_and_idempotent(db_session):
    await seed_demo_data(db_session)
    await seed_demo_data(db_session)

    assert (await db_session.execute(select(func.count(TrainingModule.id)))).scalar() == 1

    scenario = (await db_session.execute(select(Scenario))).scalar_one()
    player = ScenarioPlayer(await load_scenario_tree(db_session, scenario.id))
    while not player.is_leaf():
        player.choose(player.children()[-1].id)
    assert player.verdict().is_compliant is True

    assessment = (await db_session.execute(select(Assessment))).scalar_one()
    engine = await build_engine(db_session, assessment.id)
    for question in engine.questions:
        engine.select_answer(question.id, question.correct_option)
    assert engine.percentage() == 100
    assert engine.assessment.module_id == scenario.module_id
