"""
K12 Tutor - Catalog Seeder
Seeds a small demo catalog: knowledge points and questions for grade 4
"""
import asyncio
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import async_session_maker, init_db
from app.models.catalog import DifficultyLevel, KnowledgePoint, Question, Subject

logger = logging.getLogger(__name__)


# (subject, grade, chapter, title) -> questions as (stem, options, answer, explanation, difficulty)
CATALOG_DATA = [
    {
        "subject": Subject.MATH,
        "grade": 4,
        "chapter": "Numbers and Operations",
        "unit": "Multiplication",
        "title": "Multiplying by one-digit numbers",
        "questions": [
            ("What is 23 x 4?", ["82", "92", "96", "86"], "92",
             "20 x 4 = 80 and 3 x 4 = 12, so 80 + 12 = 92.", DifficultyLevel.EASY),
            ("What is 125 x 8?", ["1000", "900", "1025", "1100"], "1000",
             "125 x 8 = 125 x 2 x 2 x 2 = 1000.", DifficultyLevel.MEDIUM),
            ("A box holds 36 pencils. How many pencils are in 7 boxes?", ["242", "252", "262", "216"], "252",
             "36 x 7 = 30 x 7 + 6 x 7 = 210 + 42 = 252.", DifficultyLevel.MEDIUM),
        ],
    },
    {
        "subject": Subject.MATH,
        "grade": 4,
        "chapter": "Numbers and Operations",
        "unit": "Division",
        "title": "Division with remainders",
        "questions": [
            ("What is the remainder of 47 / 5?", ["1", "2", "3", "4"], "2",
             "5 x 9 = 45 and 47 - 45 = 2.", DifficultyLevel.EASY),
            ("29 students sit 4 to a table. How many tables are needed?", ["6", "7", "8", "9"], "8",
             "29 / 4 = 7 remainder 1, so one more table is needed for the last student: 8.", DifficultyLevel.HARD),
            ("What is 84 / 6?", ["12", "13", "14", "16"], "14",
             "6 x 14 = 84.", DifficultyLevel.EASY),
        ],
    },
    {
        "subject": Subject.MATH,
        "grade": 4,
        "chapter": "Fractions",
        "unit": "Fractions",
        "title": "Comparing fractions",
        "questions": [
            ("Which is larger: 3/4 or 2/3?", ["3/4", "2/3", "They are equal", "Cannot tell"], "3/4",
             "With a common denominator 12: 3/4 = 9/12 and 2/3 = 8/12.", DifficultyLevel.MEDIUM),
            ("Which fraction equals 1/2?", ["2/3", "3/6", "3/5", "4/6"], "3/6",
             "3/6 simplifies to 1/2 by dividing top and bottom by 3.", DifficultyLevel.EASY),
        ],
    },
    {
        "subject": Subject.MATH,
        "grade": 4,
        "chapter": "Geometry",
        "unit": "Perimeter and Area",
        "title": "Perimeter of rectangles",
        "questions": [
            ("A rectangle is 6 cm long and 4 cm wide. What is its perimeter?", ["10 cm", "20 cm", "24 cm", "14 cm"],
             "20 cm", "Perimeter = 2 x (6 + 4) = 20 cm.", DifficultyLevel.EASY),
            ("A square has a perimeter of 36 m. How long is one side?", ["6 m", "8 m", "9 m", "12 m"], "9 m",
             "A square has 4 equal sides: 36 / 4 = 9 m.", DifficultyLevel.MEDIUM),
        ],
    },
    {
        "subject": Subject.ENGLISH,
        "grade": 4,
        "chapter": "Grammar",
        "unit": "Verbs",
        "title": "Simple past tense",
        "questions": [
            ("Yesterday she ___ to the park.", ["go", "goes", "went", "going"], "went",
             "'Yesterday' marks the past, and the past tense of 'go' is 'went'.", DifficultyLevel.EASY),
            ("Which sentence is in the past tense?",
             ["I play football.", "I played football.", "I will play football.", "I am playing football."],
             "I played football.", "Regular verbs add -ed in the past tense.", DifficultyLevel.EASY),
        ],
    },
    {
        "subject": Subject.ENGLISH,
        "grade": 4,
        "chapter": "Vocabulary",
        "unit": "Word meaning",
        "title": "Synonyms",
        "questions": [
            ("Which word means the same as 'happy'?", ["sad", "glad", "angry", "tired"], "glad",
             "'Glad' and 'happy' both describe feeling pleased.", DifficultyLevel.EASY),
            ("Which word means the same as 'big'?", ["tiny", "large", "short", "thin"], "large",
             "'Large' and 'big' both describe great size.", DifficultyLevel.EASY),
        ],
    },
]


async def catalog_is_empty(session: AsyncSession) -> bool:
    result = await session.execute(select(func.count(KnowledgePoint.id)))
    return result.scalar() == 0


async def seed_catalog(session: AsyncSession) -> int:
    """Insert the demo catalog. Returns the number of questions created."""
    question_count = 0
    order_by_subject: dict[str, int] = {}

    for entry in CATALOG_DATA:
        subject = entry["subject"].value
        order = order_by_subject.get(subject, 0)
        order_by_subject[subject] = order + 1

        kp = KnowledgePoint(
            subject=subject,
            grade=entry["grade"],
            title=entry["title"],
            chapter=entry["chapter"],
            unit=entry["unit"],
            display_order=order,
        )
        session.add(kp)
        await session.flush()

        for stem, options, answer, explanation, difficulty in entry["questions"]:
            session.add(Question(
                subject=subject,
                grade=entry["grade"],
                knowledge_point_id=kp.id,
                stem=stem,
                options=options,
                answer=answer,
                explanation=explanation,
                difficulty=difficulty.value,
            ))
            question_count += 1

    await session.flush()
    logger.info("Seeded %d knowledge points and %d questions", len(CATALOG_DATA), question_count)
    return question_count


async def seed_if_empty() -> None:
    async with async_session_maker() as session:
        if not await catalog_is_empty(session):
            logger.info("Catalog already seeded, skipping")
            return
        await seed_catalog(session)
        await session.commit()


async def main() -> None:
    await init_db()
    await seed_if_empty()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
