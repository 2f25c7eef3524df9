"""
Question catalog — one question per category, two choices each.

Choosing the first option of a question records weight 100, the second
weight 0. Labels and outcome sentences feed the choice-impact preview.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from lifeclock.models.choice import Category


@dataclass(frozen=True)
class QuestionChoice:
    text: str
    value: str
    weight: int


@dataclass(frozen=True)
class Question:
    category: Category
    question: str
    choices: tuple[QuestionChoice, QuestionChoice]


QUESTIONS: tuple[Question, ...] = (
    Question(
        Category.mindfulness,
        "Right now, how do you choose to engage with this moment?",
        (
            QuestionChoice("Actively direct my full attention to this present experience", "mindful", 100),
            QuestionChoice("Allow my mind to wander to other tasks and distractions", "mindless", 0),
        ),
    ),
    Question(
        Category.intention,
        "How do you choose to approach this assessment process?",
        (
            QuestionChoice("Set a clear intention to learn about myself without attachment to results", "intending", 100),
            QuestionChoice("Hope for favorable outcomes and judge myself based on the results", "expecting", 0),
        ),
    ),
    Question(
        Category.action,
        "There's a difficult task you've been postponing. What do you decide to do?",
        (
            QuestionChoice("Commit to tackling it today, despite the discomfort", "acting", 100),
            QuestionChoice("Continue delaying it and find reasons to put it off further", "avoiding", 0),
        ),
    ),
    Question(
        Category.appreciation,
        "How do you choose to view your current life circumstances?",
        (
            QuestionChoice("Actively look for and acknowledge what I can appreciate right now", "appreciating", 100),
            QuestionChoice("Focus on cataloging what's lacking or problematic", "dismissing", 0),
        ),
    ),
    Question(
        Category.presence,
        "Where do you decide to place your attention right now?",
        (
            QuestionChoice("Deliberately anchor my awareness in this present moment", "present", 100),
            QuestionChoice("Let my mind drift to past regrets or future anxieties", "escaping", 0),
        ),
    ),
    Question(
        Category.selfBelief,
        "How do you choose to define your self-worth in this moment?",
        (
            QuestionChoice("Affirm my inherent value independent of any external achievements", "selfAssertive", 100),
            QuestionChoice("Base my worth on others' approval and external accomplishments", "selfDoubting", 0),
        ),
    ),
    Question(
        Category.agency,
        "When facing your current challenges, what approach do you choose?",
        (
            QuestionChoice("Identify and act on what I can directly influence and control", "personalAgency", 100),
            QuestionChoice("Dwell on how external forces are limiting my options", "victimMindset", 0),
        ),
    ),
    Question(
        Category.validation,
        "How do you choose to cultivate your sense of value?",
        (
            QuestionChoice("Practice recognizing and honoring my inherent worth", "internalWorth", 100),
            QuestionChoice("Seek praise, achievements, and external recognition", "externalValidation", 0),
        ),
    ),
)


CATEGORY_LABELS: dict[Category, str] = {
    Category.mindfulness:  "Mindfulness",
    Category.intention:    "Intention",
    Category.action:       "Action",
    Category.appreciation: "Appreciation",
    Category.presence:     "Presence",
    Category.selfBelief:   "Self-Belief",
    Category.agency:       "Agency",
    Category.validation:   "Validation",
}

# (positive, negative)
IMPACT_OUTCOMES: dict[Category, tuple[str, str]] = {
    Category.mindfulness:  ("Builds emotional resilience and clarity", "Weakens awareness and increases reactivity"),
    Category.intention:    ("Strengthens purposeful action", "Increases frustration and complaints"),
    Category.action:       ("Builds momentum and confidence", "Reinforces avoidance patterns"),
    Category.appreciation: ("Enhances contentment and relationships", "Increases dissatisfaction and negativity"),
    Category.presence:     ("Improves focus and connection", "Strengthens escapist tendencies"),
    Category.selfBelief:   ("Builds unshakeable inner confidence", "Increases dependency on others"),
    Category.agency:       ("Strengthens sense of control", "Reinforces victim mindset"),
    Category.validation:   ("Builds authentic self-worth", "Increases need for external approval"),
}


def question_for(category: Category | str) -> Question:
    category = Category(category)
    for q in QUESTIONS:
        if q.category == category:
            return q
    raise KeyError(category)


def find_choice(category: Category | str, value: str) -> Optional[tuple[Question, QuestionChoice]]:
    """Look up a catalog answer by its value token. None if it doesn't exist."""
    q = question_for(category)
    for choice in q.choices:
        if choice.value == value:
            return q, choice
    return None
