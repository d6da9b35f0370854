"""Supabase REST client for fetching student vitals."""

from typing import Any, Dict, List, Optional, Sequence

import requests

from .adapters import records_from_rows
from .config import settings
from .logging_utils import setup_logger
from .models import VitalRecord

logger = setup_logger(__name__)

VITALS_COLUMNS = "vitals_id,consent_id,timelog,temperature,heart_rate,systolic,diastolic"


class VitalsClient:
    """Client for the consent and vitals tables exposed through PostgREST."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the vitals client.

        Args:
            base_url: Project URL (defaults to settings.SUPABASE_URL).
                Should be: https://<project>.supabase.co
            api_key: Anon/publishable key (defaults to settings.SUPABASE_ANON_KEY).
            timeout: Request timeout in seconds (defaults to settings.SUPABASE_TIMEOUT).
            session: Optional requests session to reuse connections.
        """
        self.base_url = (base_url or settings.SUPABASE_URL).rstrip("/")
        self.api_key = api_key or settings.SUPABASE_ANON_KEY
        self.timeout = timeout or settings.SUPABASE_TIMEOUT
        self.session = session or requests.Session()

        if not self.base_url or not self.api_key:
            raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY must be set")

        self.headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }

    def _get_rows(self, table: str, params: Dict[str, str]) -> Optional[List[Dict[str, Any]]]:
        """GET rows from a table; None on any transport or HTTP failure."""
        url = f"{self.base_url}/rest/v1/{table}"
        try:
            response = self.session.get(url, headers=self.headers, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to fetch {table}: {e}")
            return None
        except ValueError as e:
            logger.error(f"Invalid JSON from {table}: {e}")
            return None

        if not isinstance(data, list):
            logger.warning(f"Unexpected {table} payload type: {type(data).__name__}")
            return []
        return data

    def fetch_consent_ids(self, student_id: str) -> List[int]:
        """Return the consent ids recorded for a student (empty on failure)."""
        rows = self._get_rows(
            "consent",
            {"select": "consent_id", "student_id": f"eq.{student_id}"},
        )
        if not rows:
            return []
        return [row["consent_id"] for row in rows if isinstance(row, dict) and row.get("consent_id") is not None]

    def fetch_vitals(
        self,
        consent_ids: Sequence[int],
        limit: Optional[int] = None,
        ascending: bool = True,
    ) -> List[Dict[str, Any]]:
        """Fetch raw vitals rows for the given consents, ordered by timelog.

        Args:
            consent_ids: Consent ids to include.
            limit: Maximum number of rows (defaults to settings.VITALS_FETCH_LIMIT).
            ascending: Oldest first when True, newest first otherwise.

        Returns:
            List of raw row dictionaries (empty on failure).
        """
        if not consent_ids:
            return []

        params = {
            "select": VITALS_COLUMNS,
            "consent_id": f"in.({','.join(str(cid) for cid in consent_ids)})",
            "order": f"timelog.{'asc' if ascending else 'desc'}",
            "limit": str(limit or settings.VITALS_FETCH_LIMIT),
        }
        rows = self._get_rows("vitals", params)
        return rows or []

    def fetch_student_records(
        self,
        student_id: str,
        limit: Optional[int] = None,
        ascending: bool = True,
    ) -> List[VitalRecord]:
        """Fetch and parse vitals for a student (see fetch_vitals for ordering).

        Returns:
            Parsed records; empty when the student has no consent or the fetch fails.
        """
        logger.info(f"Fetching vitals for student {student_id}")

        consent_ids = self.fetch_consent_ids(student_id)
        if not consent_ids:
            logger.info(f"No consent rows for student {student_id}")
            return []

        rows = self.fetch_vitals(consent_ids, limit=limit, ascending=ascending)
        records = records_from_rows(rows)

        logger.info(f"Fetched {len(records)} vitals records for student {student_id}")
        return records
