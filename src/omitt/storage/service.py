"""ローカルファイルシステムベースのストレージサービス。"""

import json
from pathlib import Path

from pydantic import ValidationError

from omitt.models.errors import SessionNotFoundError, StorageError
from omitt.models.session import Session


class StorageService:
    """ローカルファイルシステムを利用したセッションの永続化層。

    セッションごとに1つのJSONファイルを持ち、保存は常にセッション全体を書き換える。
    """

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir
        self._sessions_dir = data_dir / "sessions"

    def _session_dir(self, session_id: str) -> Path:
        # ディレクトリトラバーサル防止
        safe_id = Path(session_id).name
        if not safe_id or safe_id != session_id:
            raise StorageError(f"Invalid session ID: {session_id}")
        return self._sessions_dir / safe_id

    def _session_file(self, session_id: str) -> Path:
        return self._session_dir(session_id) / "session.json"

    async def save_session(self, session: Session) -> None:
        """セッションをファイルシステムに保存する。

        一時ファイルに書き出してから置き換えるため、途中状態のファイルは残らない。
        """
        session_dir = self._session_dir(session.id)
        session_dir.mkdir(parents=True, exist_ok=True)
        session_file = self._session_file(session.id)
        tmp_file = session_file.with_suffix(".json.tmp")
        tmp_file.write_text(session.model_dump_json(indent=2), encoding="utf-8")
        tmp_file.replace(session_file)

    async def load_session(self, session_id: str) -> Session:
        """セッションをファイルシステムから読み込む。

        Raises:
            SessionNotFoundError: セッションが存在しない場合。
            StorageError: 保存データが壊れている場合。
        """
        session_file = self._session_file(session_id)
        if not session_file.exists():
            raise SessionNotFoundError(session_id)
        try:
            data = json.loads(session_file.read_text(encoding="utf-8"))
            return Session.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise StorageError(f"Corrupted session data: {session_id}") from e
