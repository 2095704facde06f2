"""
Fixed texts sent back to Lark users and returned by the configuration doctor.
"""

HELP_TEXT = """Lark GPT manpages

Usage:
    /clear    remove conversation history for get a new, clean, bot context.
    /help     get more help message
"""

CLEAR_CONFIRMATION = "✅ All history removed"

UNSUPPORTED_FORMAT = "Not support other format question, only text."

GENERIC_FAILURE = "Sorry, I encountered an error trying to answer your question. Please try again."

ENCRYPT_KEY_ENABLED = {
    "zh_CN": "你配置了 Encrypt Key，请关闭该功能。",
    "en_US": "You have open Encrypt Key Feature, please close it.",
}

DOCTOR_MISSING_APP_ID = "Here is no Lark APP id, please check & re-Deploy & call again"

DOCTOR_WRONG_APP_ID = (
    "Your Lark App ID is Wrong, Please Check and call again. "
    "Lark APPID must Start with cli"
)

DOCTOR_MISSING_APP_SECRET = (
    "Here is no Lark APP Secret, please check & re-Deploy & call again"
)

DOCTOR_OK = {
    "zh_CN": "✅ 配置成功，接下来你可以在 Lark 应用当中使用机器人来完成你的工作。",
    "en_US": "✅ Configuration is correct, you can use this bot in your Lark App",
}

TEAMS_INVALID_INPUT = "Invalid input. 'text' and 'sessionId' are required."

INTERNAL_ERROR = "Internal Server Error. Please try again later."
