from datetime import datetime, timezone
from typing import Optional, Union
import pytz
from dateutil import parser as date_parser


class DateUtils:
    """
    Date/time helpers used by membership checks

    Key Features:
    - Timezone-aware datetime handling
    - Lenient parsing of backend expiry timestamps
    - Localized display for the storefront's home timezone
    """

    UTC = timezone.utc
    STORE_TIMEZONE = 'Asia/Kolkata'

    @classmethod
    def now_utc(cls) -> datetime:
        """Get current UTC datetime"""
        return datetime.now(cls.UTC)

    @classmethod
    def to_utc(cls, dt: datetime, source_timezone: Optional[str] = None) -> datetime:
        """
        Convert datetime to UTC

        Args:
            dt: datetime to convert
            source_timezone: source timezone (if dt is naive)
        """
        if dt.tzinfo is None:
            if source_timezone:
                tz = pytz.timezone(source_timezone)
                dt = tz.localize(dt)
            else:
                # Assume UTC if no timezone specified
                dt = dt.replace(tzinfo=cls.UTC)

        return dt.astimezone(cls.UTC)

    @classmethod
    def parse_iso_string(cls, date_string: str) -> datetime:
        """
        Parse ISO 8601 date string to datetime

        Handles the formats the backend emits:
        - 2026-01-03T10:30:00Z
        - 2026-01-03T10:30:00.123Z
        - 2026-01-03T10:30:00+05:30
        """
        try:
            parsed_dt = date_parser.isoparse(date_string)

            if parsed_dt.tzinfo is None:
                parsed_dt = parsed_dt.replace(tzinfo=cls.UTC)

            return parsed_dt
        except (ValueError, TypeError, OverflowError) as e:
            raise ValueError(f"Invalid date format: {date_string}") from e

    @classmethod
    def parse_optional(cls, value: Union[str, datetime, None]) -> Optional[datetime]:
        """Parse an expiry that may be missing, a string or a datetime; bad values give None"""
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            return cls.to_utc(value)
        try:
            return cls.parse_iso_string(str(value))
        except ValueError:
            return None

    @classmethod
    def is_after(cls, moment: Optional[datetime], reference: datetime) -> bool:
        """True only when moment exists and is strictly later than reference"""
        if moment is None:
            return False
        return cls.to_utc(moment) > cls.to_utc(reference)

    @classmethod
    def to_iso_string(cls, dt: datetime) -> str:
        """Convert datetime to ISO 8601 string"""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=cls.UTC)

        return dt.isoformat()

    @classmethod
    def format_for_display(
        cls,
        dt: datetime,
        timezone_name: str = STORE_TIMEZONE,
        format_string: str = '%d %b %Y'
    ) -> str:
        """
        Format datetime for user display

        Default format: "03 Jan 2026"
        """
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=cls.UTC)

        target_tz = pytz.timezone(timezone_name)
        local_dt = dt.astimezone(target_tz)

        return local_dt.strftime(format_string)
