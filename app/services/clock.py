from datetime import datetime
from typing import Callable

Clock = Callable[[], datetime]


def epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def wall_time(moment: datetime) -> str:
    return moment.strftime("%H:%M:%S")
