"""omittのカスタム例外クラス。"""


class OmittError(Exception):
    """omittの基底例外クラス。"""


class SessionNotFoundError(OmittError):
    """セッションが見つからない場合の例外。"""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class StorageError(OmittError):
    """ストレージ操作のエラー。"""


class RequirementNotFoundError(OmittError):
    """指定された要件が見つからない場合の例外。"""

    def __init__(self, category: str, requirement_id: str) -> None:
        super().__init__(f"Requirement not found: {category}/{requirement_id}")
        self.category = category
        self.requirement_id = requirement_id


class EmptyMessageError(OmittError):
    """空のメッセージが送信された場合の例外。"""

    def __init__(self) -> None:
        super().__init__("Message must not be empty")


class ConfirmationRequiredError(OmittError):
    """取り消せない操作に確認が与えられていない場合の例外。"""

    def __init__(self, operation: str) -> None:
        super().__init__(
            f"Confirmation required for irreversible operation: {operation}. Call again with confirm=true."
        )
        self.operation = operation


class RequestInProgressError(OmittError):
    """同一セッションで要件の分析・検証が実行中の場合の例外。"""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Another request is already in progress for session: {session_id}")
        self.session_id = session_id


class InvalidSnapshotError(OmittError):
    """読み込もうとしたJSONスナップショットが不正な場合の例外。"""


class OracleError(OmittError):
    """言語モデル呼び出しのエラー。"""


class OracleUnavailableError(OracleError):
    """言語モデルに到達できない、またはAPIがエラーを返した場合の例外。"""


class OracleResponseError(OracleError):
    """言語モデルの応答が空・JSONでない・スキーマに合わない場合の例外。"""


class ArchitectureGenerationError(OmittError):
    """システム構成の生成に失敗した場合の例外。"""

    def __init__(self, session_id: str, reason: str) -> None:
        super().__init__(f"Architecture generation failed for session {session_id}: {reason}")
        self.session_id = session_id
        self.reason = reason
