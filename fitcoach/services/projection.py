# services/projection.py
import math
from datetime import datetime, timezone

import numpy as np

MS_PER_DAY = 24 * 60 * 60 * 1000
MS_PER_WEEK = 7 * MS_PER_DAY
PROJECTION_DAYS = 28
WINDOW = 4


def _epoch_ms(value) -> float:
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp() * 1000


def project_progress(points: list[tuple], now: datetime | None = None, target: float | None = None) -> dict | None:
    """Least-squares trend over the last four (date, weight) points, projected 28 days past ``now``.

    Returns None with fewer than two points or when every point falls on the same instant.
    """
    recent = points[-WINDOW:]
    if len(recent) < 2:
        return None

    x = np.array([_epoch_ms(day) for day, _ in recent], dtype=float)
    y = np.array([float(weight) for _, weight in recent], dtype=float)
    if np.ptp(x) == 0:
        return None

    # centred timestamps keep the fit well conditioned
    origin = x.mean()
    design = np.vstack([x - origin, np.ones_like(x)]).T
    (slope, intercept), *_ = np.linalg.lstsq(design, y, rcond=None)

    now_ms = _epoch_ms(now or datetime.now(timezone.utc))
    current = float(y[-1])
    projected = float(slope * (now_ms + PROJECTION_DAYS * MS_PER_DAY - origin) + intercept)
    weekly_gain = float(slope * MS_PER_WEEK)

    weeks_to_target = None
    if target is not None and round(weekly_gain, 1) > 0:
        weeks_to_target = max(0, math.ceil((target - current) / weekly_gain))

    return {
        "current_weight": current,
        "projected_weight": max(projected, current),
        "weekly_gain": round(weekly_gain, 1),
        "weeks_to_target": weeks_to_target,
    }
