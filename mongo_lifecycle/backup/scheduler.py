"""Recurring backups driven by cron-style trigger patterns.

Schedules are kept in an in-memory table owned by one ``BackupScheduler``
and mirrored into the configuration store under a single settings key, so
they can be replayed when the process starts again.
"""

import asyncio
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from .._utils import logger, utc_now
from ..base import BaseConfigStore
from .exceptions import InvalidTriggerPatternError
from .models import BackupOptions, ScheduledBackup, ScheduleEntry

BackupFunc = Callable[..., Awaitable[Any]]

# Cron numbers weekdays from Sunday (0 and 7); APScheduler numbers them from Monday
_CRON_WEEKDAYS = ["sun", "mon", "tue", "wed", "thu", "fri", "sat", "sun"]


def _weekday_name(token: str) -> str:
    if token.isdigit():
        day = int(token)
        if day >= len(_CRON_WEEKDAYS):
            raise ValueError(f"day of week out of range: {token}")
        return _CRON_WEEKDAYS[day]
    return token


def _translate_day_of_week(field: str) -> str:
    parts = []
    for part in field.split(","):
        base, sep, step = part.partition("/")
        tokens = base.split("-")
        # Sunday-first ranges wrap in APScheduler numbering
        if not sep and len(tokens) == 2 and tokens[0] == "0" and tokens[1] != "0":
            parts.append("sun")
            tokens = ["1", tokens[1]]
        base = "-".join(_weekday_name(token) for token in tokens)
        parts.append(f"{base}{sep}{step}")
    return ",".join(parts)


def parse_trigger_pattern(pattern: str, timezone: str = "UTC") -> CronTrigger:
    """Build a cron trigger from a five or six field pattern.

    Five fields: ``minute hour day month day_of_week``.
    Six fields: ``second minute hour day month day_of_week``.

    Raises:
        InvalidTriggerPatternError: If the pattern cannot be parsed
    """
    fields = pattern.split()
    if len(fields) == 5:
        second = "0"
        minute, hour, day, month, day_of_week = fields
    elif len(fields) == 6:
        second, minute, hour, day, month, day_of_week = fields
    else:
        raise InvalidTriggerPatternError(pattern, f"expected 5 or 6 fields, got {len(fields)}")

    try:
        return CronTrigger(
            second=second,
            minute=minute,
            hour=hour,
            day=day,
            month=month,
            day_of_week=_translate_day_of_week(day_of_week),
            timezone=timezone,
        )
    except ValueError as e:
        raise InvalidTriggerPatternError(pattern, str(e)) from e


class BackupScheduler:
    """Own the schedule table and the timers that fire scheduled backups."""

    def __init__(
        self,
        backup_func: BackupFunc,
        config_store: BaseConfigStore,
        schedules_key: str = "backupSchedules",
        timezone: str = "UTC",
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        """Initialize backup scheduler.

        Args:
            backup_func: Coroutine called as ``backup_func(cluster, database, compress=...)``
            config_store: Store the schedule table is persisted to
            schedules_key: Settings key holding the schedule table
            timezone: Timezone trigger patterns are evaluated in
            scheduler: APScheduler instance, created if not given
        """
        self.backup_func = backup_func
        self.config_store = config_store
        self.schedules_key = schedules_key
        self.timezone = timezone
        self._scheduler = scheduler or AsyncIOScheduler(timezone=timezone)
        self._entries: Dict[str, ScheduleEntry] = {}
        self._triggers: Dict[str, CronTrigger] = {}
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)

    async def schedule_backup(
        self,
        cluster: str,
        database: str,
        trigger_pattern: str,
        options: Optional[BackupOptions] = None,
        created_at: Optional[datetime] = None,
    ) -> str:
        """Install (or replace) the recurring backup of a database.

        Returns:
            Schedule id, ``{cluster}-{database}``
        """
        trigger = parse_trigger_pattern(trigger_pattern, self.timezone)
        entry = ScheduleEntry(
            id=ScheduleEntry.make_id(cluster, database),
            cluster=cluster,
            database=database,
            trigger_pattern=trigger_pattern,
            options=options or BackupOptions(),
            created_at=created_at or utc_now(),
        )

        async with self._lock:
            if entry.id in self._entries:
                self._cancel(entry.id)

            self._scheduler.add_job(
                self._run_backup,
                trigger,
                args=[entry.id, cluster, database, entry.options],
                id=entry.id,
                name=f"Backup {cluster}/{database}",
                replace_existing=True,
            )
            self._entries[entry.id] = entry
            self._triggers[entry.id] = trigger

            await self._persist(entry.id, entry)

        logger.info(f"Scheduled backup created: {entry.id} ({trigger_pattern})")
        return entry.id

    async def unschedule_backup(self, schedule_id: str) -> bool:
        """Cancel a schedule and remove it from the store.

        Returns:
            True if the schedule existed
        """
        async with self._lock:
            if schedule_id not in self._entries:
                return False

            self._cancel(schedule_id)
            del self._entries[schedule_id]
            del self._triggers[schedule_id]
            await self._persist(schedule_id, None)

        logger.info(f"Unscheduled backup: {schedule_id}")
        return True

    def list_scheduled_backups(self) -> List[ScheduledBackup]:
        now = datetime.now(self._scheduler.timezone)
        return [
            ScheduledBackup(
                **entry.model_dump(),
                next_run=self._triggers[entry_id].get_next_fire_time(None, now),
            )
            for entry_id, entry in self._entries.items()
        ]

    async def load_persisted(self) -> int:
        """Re-install every schedule found in the configuration store.

        Malformed entries are logged and skipped.

        Returns:
            Number of schedules installed
        """
        schedules = self.config_store.get_setting(self.schedules_key) or {}
        loaded = 0

        for schedule_id, raw in list(schedules.items()):
            try:
                entry = ScheduleEntry.model_validate({"id": schedule_id, "createdAt": utc_now(), **raw})
                await self.schedule_backup(
                    entry.cluster,
                    entry.database,
                    entry.trigger_pattern,
                    entry.options,
                    created_at=entry.created_at,
                )
                loaded += 1
            except Exception as e:
                logger.error(f"Failed to load scheduled backup {schedule_id}: {e}")

        return loaded

    async def _run_backup(self, schedule_id: str, cluster: str, database: str, options: BackupOptions) -> None:
        try:
            logger.info(f"Starting scheduled backup: {schedule_id}")
            await self.backup_func(cluster, database, compress=options.compress)
            logger.info(f"Scheduled backup completed: {schedule_id}")
        except Exception as e:
            logger.error(f"Scheduled backup failed: {schedule_id}: {e}")

    def _cancel(self, schedule_id: str) -> None:
        if self._scheduler.get_job(schedule_id) is not None:
            self._scheduler.remove_job(schedule_id)

    async def _persist(self, schedule_id: str, entry: Optional[ScheduleEntry]) -> None:
        schedules = dict(self.config_store.get_setting(self.schedules_key) or {})
        if entry is None:
            schedules.pop(schedule_id, None)
        else:
            schedules[schedule_id] = entry.to_persisted()
        self.config_store.set_setting(self.schedules_key, schedules)
        await self.config_store.save()
