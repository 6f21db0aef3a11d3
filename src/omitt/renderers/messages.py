"""チャットに表示するアシスタントの定型メッセージ。"""

from omitt.models.validation import ValidationResult, ValidationStatus

EXTRACTION_ERROR_MESSAGE = "申し訳ありません。要件の分析中にエラーが発生しました。もう一度お試しください。"
VALIDATION_ERROR_MESSAGE = "申し訳ありません。要件の検証中にエラーが発生しました。もう一度お試しください。"
NOTHING_TO_VALIDATE_MESSAGE = "検証する要件がありません。まず要件を抽出してください。"
NOTHING_EXTRACTED_MESSAGE = (
    "ご入力いただいた内容から具体的な要件を抽出できませんでした。もう少し詳しく教えていただけますか？"
)
IMPORT_FAILED_MESSAGE = "❌ JSONファイルの読み込みに失敗しました。ファイル形式が正しくない可能性があります。"

_STATUS_EMOJI: dict[ValidationStatus, str] = {
    "good": "✅",
    "warning": "⚠️",
    "critical": "❌",
}

_STATUS_TEXT: dict[ValidationStatus, str] = {
    "good": "良好",
    "warning": "注意が必要",
    "critical": "重要な問題あり",
}

_CLOSING_TEXT: dict[ValidationStatus, str] = {
    "good": "👍 要件がよく整理されています。このまま見積もり・開発の検討を進めることができそうです。",
    "warning": "🔧 いくつか改善できる点がありますが、対応していただければ見積もり・開発を進められます。",
    "critical": "🚨 重要な確認事項があります。見積もりの精度を上げるため、これらの内容を整理していただくことをお勧めします。",
}

# (見出し, ValidationResultの属性名)
_FINDING_SECTIONS: list[tuple[str, str]] = [
    ("🔍 **追加で検討が必要な項目:**", "missing_requirements"),
    ("⚡ **矛盾する内容:**", "contradictions"),
    ("❓ **より詳しく決めた方が良い内容:**", "unclear_requirements"),
    ("💡 **より良いシステムにするためのご提案:**", "recommendations"),
]


def compose_extraction_reply(total: int) -> str:
    """要件抽出後のアシスタントの返答を組み立てる。

    total はストアに実際に追加された件数。
    """
    if total == 0:
        return NOTHING_EXTRACTED_MESSAGE
    return " ".join(
        [
            f"{total}個の要件を抽出しました。",
            "他にもご希望の機能や要件はありますか？",
            "詳細について確認したい点があれば、お気軽にお聞かせください。",
        ]
    )


def _critical_question_lines(result: ValidationResult) -> list[str]:
    questions = result.critical_questions
    lines: list[str] = []
    if questions.system_type_missing:
        lines.append("• どのような種類のシステムをお考えですか？（Webサイト、スマホアプリ、社内システムなど）")
    if questions.personal_data_missing:
        lines.append("• 氏名や連絡先などの個人情報を扱いますか？")
    if questions.user_scope_missing:
        lines.append("• どなたが使うシステムですか？（社内の方のみ、一般のお客様も含む、など）")
    return lines


def render_validation_message(result: ValidationResult) -> str:
    """要件検証の結果をチャット用のメッセージに整形する。

    completeness_score が合格ライン以上なら「合格」、未満なら「要検討」と判定を表示する。
    """
    status = result.overall_status
    parts: list[str] = ["📋 **要件の確認結果**\n\n"]
    parts.append(
        f"{_STATUS_EMOJI[status]} **総合評価**: {_STATUS_TEXT[status]} ({result.completeness_score}点/100点)\n\n"
    )

    if result.passed:
        parts.append("🎯 **判定**: 合格（このまま見積もり依頼の準備に進めます）\n\n")
    else:
        parts.append("📝 **判定**: 要検討（見積もり依頼の前に、もう少し要件を補っていただく必要があります）\n\n")

    question_lines = _critical_question_lines(result)
    if question_lines:
        parts.append("❗ **まず教えていただきたいこと:**\n" + "\n".join(question_lines) + "\n\n")

    for heading, attr in _FINDING_SECTIONS:
        findings: list[str] = getattr(result, attr)
        if findings:
            parts.append(heading + "\n" + "".join(f"• {finding}\n" for finding in findings) + "\n")

    parts.append(_CLOSING_TEXT[status])
    return "".join(parts)


def compose_import_notice(total_requirements: int, with_architecture: bool) -> str:
    restored = f"{total_requirements}件の要件" + ("とシステム構成" if with_architecture else "")
    return f"📂 JSONファイルから要件を読み込みました。（{restored}を復元）"


def compose_export_notice(filename: str) -> str:
    return f"📁 構造化要件をJSONファイル「{filename}」として保存しました。"
