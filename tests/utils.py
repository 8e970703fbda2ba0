"""Utility helpers for test factories."""

from __future__ import annotations

from app.core.security import hash_password
from app.models.user import User, ROLE_LEARNER
from app.schemas.assessment import AssessmentCreateSchema, AssessmentSchema, QuestionInSchema, QuestionSchema
from app.schemas.module import ModuleCreateSchema
from app.schemas.scenario import DecisionNodeSchema, NodeInSchema, ScenarioCreateSchema
from app.services.authoring import create_assessment, create_module, create_scenario

PASSWORD = "correct-horse"


def make_node(node_id, parent=None, *, scenario_id=1, is_root=False, sort_order=0, is_compliant=None, explanation=None):
    return DecisionNodeSchema(
        id=node_id,
        scenario_id=scenario_id,
        parent_node_id=parent,
        is_root=is_root,
        node_text=f"node {node_id}",
        is_compliant=is_compliant,
        explanation=explanation,
        sort_order=sort_order,
    )


def make_questions(correct: list[int], assessment_id: int = 1, options: int = 4) -> list[QuestionSchema]:
    return [
        QuestionSchema(
            id=index + 1,
            assessment_id=assessment_id,
            question_text=f"Question {index + 1}",
            options=[f"Option {chr(65 + o)}" for o in range(options)],
            correct_option=answer,
            explanation=f"Because {chr(65 + answer)}" if index % 2 == 0 else None,
            sort_order=index,
        )
        for index, answer in enumerate(correct)
    ]


def make_assessment(pass_threshold: int = 70, module_id: int | None = 1, assessment_id: int = 1) -> AssessmentSchema:
    return AssessmentSchema(
        id=assessment_id,
        title="Quiz",
        pass_threshold=pass_threshold,
        question_count=4,
        module_id=module_id,
    )


async def create_user(db, **kwargs) -> User:
    defaults = {
        "email": "learner@example.com",
        "hashed_password": hash_password(PASSWORD),
        "full_name": "Test Learner",
        "role": ROLE_LEARNER,
    }
    defaults.update(kwargs)
    user = User(**defaults)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def login(client, email: str = "learner@example.com", password: str = PASSWORD):
    resp = await client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()


async def create_module_with_content(db, title: str = "Data Protection Basics"):
    return await create_module(
        db,
        ModuleCreateSchema(
            title=title,
            content="## Intro\nWhy it matters.\n## Rules\nWhat to do.\n## Summary\nRecap.",
        ),
    )


async def create_quiz(db, correct=(0, 1, 2, 3), pass_threshold=70, module_id=None):
    return await create_assessment(
        db,
        AssessmentCreateSchema(
            title="Compliance quiz",
            pass_threshold=pass_threshold,
            module_id=module_id,
            questions=[
                QuestionInSchema(
                    question_text=f"Q{i + 1}",
                    options=["A", "B", "C", "D"],
                    correct_option=answer,
                    explanation=f"Answer is {'ABCD'[answer]}",
                )
                for i, answer in enumerate(correct)
            ],
        ),
    )


async def create_tree(db, module_id=None):
    """root -> (report [leaf, compliant], ignore -> (escalate [leaf], delete [leaf]))"""
    return await create_scenario(
        db,
        ScenarioCreateSchema(
            title="Lost laptop",
            module_id=module_id,
            nodes=[
                NodeInSchema(key="root", node_text="You lose a laptop with customer data."),
                NodeInSchema(key="ignore", parent_key="root", sort_order=2, node_text="Say nothing."),
                NodeInSchema(
                    key="report",
                    parent_key="root",
                    sort_order=1,
                    node_text="Report the breach.",
                    is_compliant=True,
                    explanation="Breaches must be reported promptly.",
                ),
                NodeInSchema(
                    key="escalate",
                    parent_key="ignore",
                    sort_order=0,
                    node_text="A week later you tell IT.",
                    is_compliant=False,
                    explanation="The delay breached the notification duty.",
                ),
                NodeInSchema(
                    key="delete",
                    parent_key="ignore",
                    sort_order=1,
                    node_text="You wipe the backup.",
                    is_compliant=False,
                ),
            ],
        ),
    )
