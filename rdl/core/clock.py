import time
from datetime import datetime

# Time source for the whole core. Durations are measured on the monotonic clock in integer milliseconds (immune to
# wall clock changes mid-drive), while wall() is only used for the human readable timestamps in the report.
class Clock:

    def now_ms(self) -> int:
        return int(time.monotonic() * 1000)

    def wall(self) -> datetime:
        return datetime.now().astimezone()
