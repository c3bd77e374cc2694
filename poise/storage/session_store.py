"""Session store persisting one JSON record per recorded session."""

import os
import json
import logging
import tempfile
from pathlib import Path
from datetime import datetime
from typing import Dict, Any, Optional, List

from ..models.session import SessionSummary


logger = logging.getLogger(__name__)

RECORD_SUFFIX = ".json"


class SessionStore:
    """Manages durable storage of session summaries keyed by session id."""

    def __init__(self, sessions_dir: str = "./data/sessions", prefix: str = "bodylang"):
        """Initialize session store with its directory.

        Args:
            sessions_dir: Directory holding the session records
            prefix: Record filename prefix, one per session kind
        """
        self.sessions_dir = Path(sessions_dir)
        self.prefix = prefix
        self.sessions_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"SessionStore initialized with sessions_dir: {self.sessions_dir} (prefix: {prefix})")

    def record_path(self, session_id: str) -> Path:
        """Get full path to the record of a session.

        Args:
            session_id: Session identifier

        Returns:
            Path to the session's JSON record
        """
        return self.sessions_dir / f"{self.prefix}-session-{session_id}{RECORD_SUFFIX}"

    def _record_files(self) -> List[Path]:
        pattern = f"{self.prefix}-session-*{RECORD_SUFFIX}"
        return [path for path in self.sessions_dir.glob(pattern) if path.is_file()]

    def save(self, summary: SessionSummary) -> str:
        """Save a session summary, replacing any record with the same id.

        The record is written to a temporary file and moved into place, so a
        failed save never leaves a truncated record behind.

        Args:
            summary: Session summary to save

        Returns:
            Path to saved record

        Raises:
            OSError: If the record cannot be written
        """
        record_file = self.record_path(summary.id)
        fd, tmp_path = tempfile.mkstemp(dir=self.sessions_dir, prefix=".tmp-", suffix=RECORD_SUFFIX)

        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(summary.to_dict(), f, indent=2)
            os.replace(tmp_path, record_file)
        except Exception as e:
            logger.error(f"Error saving session {summary.id}: {e}")
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        logger.info(f"Session saved: {record_file} ({summary.sample_count} samples)")
        return str(record_file)

    def _read_record(self, record_file: Path) -> SessionSummary:
        with open(record_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return SessionSummary.from_dict(data)

    def load(self, session_id: str) -> Optional[SessionSummary]:
        """Load one session summary.

        Args:
            session_id: Session identifier

        Returns:
            SessionSummary or None if missing or unreadable
        """
        record_file = self.record_path(session_id)

        if not record_file.exists():
            logger.warning(f"Session record not found: {record_file}")
            return None

        try:
            return self._read_record(record_file)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Error loading session {session_id}: {e}")
            return None

    def load_all(self) -> List[SessionSummary]:
        """Load every readable session, newest first.

        Malformed or unreadable records are skipped.

        Returns:
            List of session summaries sorted by created_at descending
        """
        sessions = []
        for record_file in self._record_files():
            try:
                sessions.append(self._read_record(record_file))
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.debug(f"Skipping unreadable session record {record_file}: {e}")

        sessions.sort(key=lambda s: s.created_at, reverse=True)
        logger.debug(f"Loaded {len(sessions)} sessions")
        return sessions

    def delete(self, summary: SessionSummary) -> bool:
        """Delete the record of a session if present.

        Returns:
            True if a record was removed
        """
        return self.delete_by_id(summary.id)

    def delete_by_id(self, session_id: str) -> bool:
        record_file = self.record_path(session_id)
        try:
            record_file.unlink()
        except FileNotFoundError:
            return False

        logger.info(f"Deleted session record: {record_file}")
        return True

    def cleanup_old_sessions(self, max_age_days: int = 30) -> int:
        """Delete records older than max_age_days.

        Args:
            max_age_days: Maximum age in days before cleanup

        Returns:
            Number of sessions cleaned up
        """
        cutoff_time = datetime.now().timestamp() - (max_age_days * 24 * 60 * 60)
        cleaned_count = 0

        for record_file in self._record_files():
            if record_file.stat().st_mtime < cutoff_time:
                record_file.unlink()
                cleaned_count += 1
                logger.info(f"Cleaned up old session: {record_file}")

        logger.info(f"Cleaned up {cleaned_count} old sessions")
        return cleaned_count

    def get_storage_stats(self) -> Dict[str, Any]:
        """Get storage usage statistics.

        Returns:
            Dictionary with storage statistics
        """
        total_size = 0
        session_count = 0

        for record_file in self._record_files():
            session_count += 1
            total_size += record_file.stat().st_size

        return {
            "total_size_bytes": total_size,
            "total_size_mb": round(total_size / (1024 * 1024), 2),
            "session_count": session_count,
            "sessions_directory": str(self.sessions_dir),
        }
