"""
Numeric context for the stress coach chat.

The assistant phrases its replies itself; this module only decides the
numbers it may quote: the current stress percentage and level, the top
stressors and the next deadlines.
"""
from datetime import datetime
from typing import Final, List, Optional, Sequence, Tuple

from ..models.analytics import AIStressLevel, ChatContext, DailyStress, Deadline, TopStressor
from ..models.task import TaskRecord
from ..utils.numeric import round_half_up, safe_div
from .stress_scorer import display_percent, hours_until_due, score_aggregate
from .temporal_aggregator import calculate_daily_stress, most_stressful_tasks

DUE_SOON_HOURS: Final[float] = 72.0

_RELATIVE_UNITS: Final[Tuple[Tuple[str, float], ...]] = (
    ("year", 365 * 86400),
    ("month", 30 * 86400),
    ("week", 7 * 86400),
    ("day", 86400),
    ("hour", 3600),
    ("minute", 60),
    ("second", 1),
)


############################################################################################################
def relative_time(target: datetime, now: datetime) -> str:
    """Coarse relative phrase such as ``in 3 days`` or ``2 hours ago``."""
    seconds = (target - now).total_seconds()
    magnitude = abs(seconds)
    for unit, size in _RELATIVE_UNITS:
        count = int(magnitude // size)
        if count >= 1:
            phrase = f"{count} {unit}{'s' if count != 1 else ''}"
            return f"in {phrase}" if seconds > 0 else f"{phrase} ago"
    return "now"


def active_tasks(tasks: Sequence[TaskRecord]) -> List[TaskRecord]:
    return [task for task in tasks if not task.is_completed]


############################################################################################################
def derive_ai_stress_level(
    tasks: Sequence[TaskRecord], daily: DailyStress, now: datetime
) -> AIStressLevel:
    overdue = due_soon = 0
    for task in active_tasks(tasks):
        hours = hours_until_due(task, now)
        if hours is None:
            continue
        if hours < 0:
            overdue += 1
        elif hours <= DUE_SOON_HOURS:
            due_soon += 1

    level = daily.percent
    if level >= 75 or overdue >= 2:
        label = "High"
    elif level >= 50 or overdue >= 1 or due_soon >= 2:
        label = "Moderate"
    else:
        label = "Low"
    return AIStressLevel(percent=level, overdue=overdue, due_soon=due_soon, label=label)


def next_deadlines(tasks: Sequence[TaskRecord], limit: int = 3) -> List[Deadline]:
    dated = [task for task in active_tasks(tasks) if task.due_date is not None]
    dated.sort(key=lambda task: task.due_date)  # type: ignore[arg-type, return-value]
    return [
        Deadline(task_id=task.id, title=task.title, due=task.due_date)  # type: ignore[arg-type]
        for task in dated[: max(limit, 0)]
    ]


def build_chatbot_reply(tasks: Sequence[TaskRecord], daily: DailyStress, now: datetime) -> str:
    level = derive_ai_stress_level(tasks, daily, now)
    deadlines = next_deadlines(tasks)
    next_text = (
        ", ".join(f"{item.title} ({item.due.strftime('%b %d')})" for item in deadlines)
        if deadlines
        else "None"
    )

    if level.label == "High":
        guidance = (
            "Pause for 3-5 minutes, then tackle the most impactful overdue task. "
            "Use a 25-minute focus block."
        )
    elif level.label == "Moderate":
        guidance = "Prioritize items due within 72 hours. Complete one small task to build momentum."
    else:
        guidance = "Maintain pace. Plan the next 2-3 steps and clear quick wins."

    return (
        f"Stress: {int(round_half_up(level.percent))}% ({level.label}). "
        f"Due soon: {level.due_soon}. Overdue: {level.overdue}. "
        f"Next deadlines: {next_text}. {guidance}"
    )


############################################################################################################
def overall_recommendations(daily: DailyStress) -> List[str]:
    if daily.percent >= 75:
        return [
            "Prioritize self-care: take a short walk, hydrate, and schedule a 10-minute reset.",
            "Tackle the top 1-2 highest-stress tasks first; break each into small steps.",
            "Reschedule or renegotiate non-urgent items to reduce load for today.",
        ]
    if daily.percent >= 50:
        return [
            "Focus on tasks due within 72 hours; timebox 25-30 minutes per block.",
            "Batch similar tasks to minimize context switching.",
            "Plan a short buffer after each task to avoid spillover stress.",
        ]
    return [
        "Maintain momentum: plan the next 2-3 tasks for tomorrow.",
        "Wrap up loose ends or quick wins to keep stress low.",
        "Do a brief review of priorities and tidy your workspace.",
    ]


def task_recommendations(
    tasks: Sequence[TaskRecord], daily: Optional[DailyStress], now: datetime
) -> List[str]:
    """One line per open task, most stressful first, with its share of today's total."""
    scored = sorted(
        ((task, score_aggregate(task, now)) for task in active_tasks(tasks)),
        key=lambda item: item[1],
        reverse=True,
    )
    if not scored:
        return []
    total = (daily.total if daily and daily.total else 0) or sum(stress for _, stress in scored)

    lines = []
    for task, stress in scored:
        due_text = relative_time(task.due_date, now) if task.due_date else "no due date"
        priority = task.priority.value if task.priority else "Medium"
        share = int(round_half_up(safe_div(stress, total) * 100))
        lines.append(
            f'"{task.title}" - priority {priority}, due {due_text}. '
            f"Completing this could reduce today's stress by ~{share}%."
        )
    return lines


def focus_recommendation(tasks: Sequence[TaskRecord], daily: DailyStress, now: datetime) -> str:
    """Single headline suggestion built around the most stressful open task."""
    open_tasks = active_tasks(tasks)
    if not open_tasks:
        return "All tasks complete. You're in zen mode!"

    top = max(open_tasks, key=lambda task: score_aggregate(task, now))
    drop = int(round_half_up(safe_div(score_aggregate(top, now), daily.total) * 100))
    normalized = daily.normalized
    if normalized >= 3.5:
        return f'High stress! Complete "{top.title}" to reduce stress by ~{drop}%.'
    due = top.due_date
    if normalized >= 2.5:
        return f'Focus on "{top.title}" - due {relative_time(due, now) if due else "no due date"}.'
    return f'Good pace. Next: "{top.title}" by {due.strftime("%b %d") if due else "any time"}.'


############################################################################################################
def build_chat_context(
    tasks: Sequence[TaskRecord],
    now: datetime,
    top_limit: int = 5,
    deadline_limit: int = 3,
) -> ChatContext:
    """
    Assemble everything the assistant may quote.

    ``stress.percent`` comes from the aggregate profile (daily percentage);
    ``top_stressors`` percentages come from the display profile. They are
    separate figures and are never combined.
    """
    daily = calculate_daily_stress(tasks, now)
    return ChatContext(
        stress=derive_ai_stress_level(tasks, daily, now),
        top_stressors=[
            TopStressor(task_id=item.task_id, title=item.title, percent=display_percent(item.stress))
            for item in most_stressful_tasks(tasks, now, top_limit)
        ],
        next_deadlines=next_deadlines(tasks, deadline_limit),
        reply=build_chatbot_reply(tasks, daily, now),
        recommendations=overall_recommendations(daily),
    )
