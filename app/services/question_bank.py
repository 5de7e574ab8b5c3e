"""
The shared question pool.

Questions are immutable and shared by every room. The pool below is shipped
with the service and inserted on startup; rows added by hand in the database
are kept as they are.
"""
import logging
from typing import List, Tuple

from sqlalchemy.orm import Session

from app.models.question import Question
from app.repositories.question_repository import QuestionRepository

logger = logging.getLogger(__name__)

QUESTION_POOL: List[Tuple[str, str]] = [
    ("What is one small thing I did recently that made you smile?", "appreciation"),
    ("Which of my habits secretly charms you the most?", "appreciation"),
    ("What is something about me you are grateful for today?", "appreciation"),
    ("When did you last feel really proud of us?", "appreciation"),
    ("What is your favourite memory from our first month together?", "memories"),
    ("Which trip or outing of ours would you relive tomorrow?", "memories"),
    ("What was your very first impression of me?", "memories"),
    ("Which song reminds you of us, and why?", "memories"),
    ("What is a moment when you felt completely understood by me?", "memories"),
    ("Where do you see us living in ten years?", "future"),
    ("What is one adventure you want us to have before next summer?", "future"),
    ("Which new tradition would you like us to start?", "future"),
    ("What does a perfect ordinary weekend look like for us a year from now?", "future"),
    ("What is a skill you would love for us to learn together?", "future"),
    ("What is something you have never told me about your childhood?", "deep"),
    ("When do you feel most loved by me?", "deep"),
    ("What is a fear you would like my help with?", "deep"),
    ("What does home mean to you?", "deep"),
    ("Which belief of yours has changed the most since we met?", "deep"),
    ("What do you need more of from me this week?", "deep"),
    ("If we had a whole free day tomorrow, how would you spend it with me?", "fun"),
    ("Which fictional couple are we most like?", "fun"),
    ("What would our names be if we were a band?", "fun"),
    ("If you could teleport us anywhere for dinner tonight, where would we go?", "fun"),
    ("What is the silliest argument we have ever had?", "fun"),
    ("Which food would you eat every day for a month if you had to?", "fun"),
    ("What made today better or harder than yesterday?", "daily"),
    ("What is one thing you are looking forward to this week?", "daily"),
    ("What drained your energy today, and what gave it back?", "daily"),
    ("What is something you learned today?", "daily"),
    ("How can I make tomorrow a little easier for you?", "daily"),
    ("Which of your friends do you think understands us best?", "people"),
    ("What is a family tradition you want to keep?", "people"),
    ("Who taught you the most about love?", "people"),
    ("What is your favourite way for me to show affection?", "intimacy"),
    ("When do you feel closest to me?", "intimacy"),
    ("What is a compliment you would love to hear more often?", "intimacy"),
    ("What is a dream you have put on hold that we could work towards?", "goals"),
    ("What is one goal you want me to hold you accountable for?", "goals"),
    ("How do you want us to handle money differently next year?", "goals"),
]


def seed_question_bank(db: Session) -> int:
    """
    Insert pool questions whose text is not in the database yet.

    Returns:
        Number of questions inserted
    """
    repo = QuestionRepository(db)
    existing = repo.get_existing_texts()
    missing = [(text, category) for text, category in QUESTION_POOL if text not in existing]
    if not missing:
        return 0

    db.add_all([Question(text=text, category=category) for text, category in missing])
    db.commit()
    logger.info("Seeded %d questions into the shared pool", len(missing))
    return len(missing)


def all_question_ids(db: Session) -> List[int]:
    return QuestionRepository(db).get_all_ids()
