"""Built-in example nuggets used when generation is unavailable."""

from __future__ import annotations

from eunoia.nuggets.models import NuggetCategory, SharedNugget
from eunoia.utils.helpers import utcnow

_GENERIC = [
    ("Small steps", "Pick one tiny action you can finish in two minutes. Starting is often the hardest part, and momentum makes the next step easier."),
    ("Reflect briefly", "Ask yourself what went well today and why. Naming the cause of a good moment makes it easier to repeat."),
    ("One thing at a time", "Switching between tasks costs attention. Finishing one thing before starting the next usually saves time overall."),
]

EXAMPLES: dict[NuggetCategory, list[tuple[str, str]]] = {
    NuggetCategory.MINDFULNESS: [
        ("Mindful breathing", "Take a moment to breathe consciously. Notice the air flowing in and out through your nose."),
        ("Living in the moment", "Focus fully on what you are doing right now, without drifting to the past or the future."),
        ("Watching thoughts", "Observe your thoughts like passing clouds, without judging or holding on to them."),
        ("Body scan", "Move your attention slowly through your body, region by region, and simply notice what you feel."),
    ],
    NuggetCategory.PERSONAL_GROWTH: [
        ("Gratitude for small things", "Write down three small things you are grateful for today."),
        ("Challenges as chances", "Think about a challenge that ultimately made you stronger. What did it teach you?"),
        ("Everyday wonders", "Pay deliberate attention today to the small wonders we usually take for granted."),
    ],
    NuggetCategory.RELATIONSHIPS: [
        ("Show appreciation", "Think of someone who enriches your life and how you could show them your appreciation today."),
        ("Listen to understand", "In your next conversation, try to understand before you respond. People feel valued when they feel heard."),
        ("Shared moments", "Small shared rituals, like a weekly walk or call, strengthen relationships more than rare big gestures."),
    ],
    NuggetCategory.HEALTH: [
        ("Movement in daily life", "Add more movement to your day: take the stairs or go for short walks during breaks."),
        ("Enough sleep", "A regular bedtime and a calming evening routine are among the most effective ways to improve sleep."),
        ("Managing stress", "Deep breathing, meditation or physical activity all help the body come down from stress."),
    ],
    NuggetCategory.AI_GENERATED: [
        ("Creative perspectives", "Look at a current challenge from three different perspectives. What changes?"),
        ("New habits", "Which small habit could you add to your day that might have a large effect in the long run?"),
        ("Positive affirmation", "Phrase one positive statement about yourself that you especially need today and repeat it a few times."),
    ],
}


def example_pairs(category: NuggetCategory) -> list[tuple[str, str]]:
    return EXAMPLES.get(category, _GENERIC)


def example_nuggets(category: NuggetCategory) -> list[SharedNugget]:
    """
    Example pool nuggets for a category.

    Ids are stable, so storing them twice never creates duplicates and a
    user who has seen them is not shown them again.
    """
    now = utcnow()
    return [
        SharedNugget(
            id=f"example-{category.value}-{index}",
            category=category,
            title=title,
            content=content,
            created_at=now,
        )
        for index, (title, content) in enumerate(example_pairs(category))
    ]
