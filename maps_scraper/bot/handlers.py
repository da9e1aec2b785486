"""Telegram bot handlers for operating the scraper.

Thin admin-only handlers that translate bot commands into controller
commands and controller responses into chat replies. The controller lives in
``application.bot_data["controller"]``.
"""

import logging

from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes

from ..config import config
from ..models import ExportFormat
from .controller import ScraperController
from .messages import (
    REPLY_ALREADY_RUNNING,
    REPLY_BAD_FORMAT,
    REPLY_COMMAND_FAILED,
    REPLY_EXPORT_CAPTION,
    REPLY_NO_DATA,
    REPLY_RESET,
    REPLY_RESET_WHILE_RUNNING,
    REPLY_STARTED,
    REPLY_STATUS,
    REPLY_STOPPED,
    START_MESSAGE,
    STATE_EMOJI,
)

logger = logging.getLogger(__name__)


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command.

    Sends the list of available commands.

    Args:
        update: Telegram update object containing message data.
        context: Bot context for accessing application instance.
    """
    if not _check_admin_permissions(update) or update.message is None:
        return
    await update.message.reply_text(START_MESSAGE, disable_web_page_preview=True)


async def scrape(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /scrape command."""
    if not _check_admin_permissions(update) or update.message is None:
        return

    response = await _controller(context).handle({"action": "start"})
    if response["status"] == "already_running":
        await update.message.reply_text(REPLY_ALREADY_RUNNING)
    elif response["status"] == "started":
        await update.message.reply_text(REPLY_STARTED)
    else:
        await _reply_failure(update, response)


async def stop(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /stop command."""
    if not _check_admin_permissions(update) or update.message is None:
        return

    response = await _controller(context).handle({"action": "stop"})
    if response["status"] == "stopped":
        await update.message.reply_text(REPLY_STOPPED.format(count=response["count"]))
    else:
        await _reply_failure(update, response)


async def reset(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /reset command."""
    if not _check_admin_permissions(update) or update.message is None:
        return

    response = await _controller(context).handle({"action": "reset"})
    if response["status"] == "reset":
        await update.message.reply_text(REPLY_RESET)
    elif response["status"] == "already_running":
        await update.message.reply_text(REPLY_RESET_WHILE_RUNNING.format(count=response["count"]))
    else:
        await _reply_failure(update, response)


async def status(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /status command."""
    if not _check_admin_permissions(update) or update.message is None:
        return

    response = await _controller(context).handle({"action": "getStatus"})
    if "state" not in response:
        await _reply_failure(update, response)
        return

    state = response["state"]
    if response.get("stopReason"):
        state = f"{state} ({response['stopReason']})"
    await update.message.reply_text(
        REPLY_STATUS.format(
            state_emoji=STATE_EMOJI.get(response["state"], ""),
            state=state,
            count=response["count"],
        )
    )


async def export(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /export command.

    Writes the collected records in the requested format (csv by default)
    and sends the file back to the chat.

    Args:
        update: Telegram update object containing message data.
        context: Bot context, ``context.args[0]`` is the optional format.
    """
    if not _check_admin_permissions(update) or update.message is None:
        return
    message = update.message

    fmt = ExportFormat.CSV
    if context.args:
        try:
            fmt = ExportFormat(context.args[0].lower())
        except ValueError:
            await message.reply_text(REPLY_BAD_FORMAT)
            return

    response = await _controller(context).handle({"action": "export", "format": fmt.value})
    if response["status"] == "no_data":
        await message.reply_text(REPLY_NO_DATA)
        return
    if response["status"] != "exported":
        await _reply_failure(update, response)
        return

    try:
        with open(response["path"], "rb") as f:
            await message.reply_document(
                document=f,
                caption=REPLY_EXPORT_CAPTION.format(count=response["count"], format=fmt.value),
            )
    except Exception as e:
        logger.error(f"Failed to send export file: {e}")
        await message.reply_text(REPLY_COMMAND_FAILED.format(message=e))


def register_handlers(app: Application) -> None:
    """Register all operator commands on the application."""
    app.add_handler(CommandHandler("start", start))
    app.add_handler(CommandHandler("help", start))
    app.add_handler(CommandHandler("scrape", scrape))
    app.add_handler(CommandHandler("stop", stop))
    app.add_handler(CommandHandler("reset", reset))
    app.add_handler(CommandHandler("status", status))
    app.add_handler(CommandHandler("export", export))


# === HELPER FUNCTIONS ===


def _controller(context: ContextTypes.DEFAULT_TYPE) -> ScraperController:
    return context.application.bot_data["controller"]


async def _reply_failure(update: Update, response: dict) -> None:
    if update.message is None:
        return
    await update.message.reply_text(
        REPLY_COMMAND_FAILED.format(message=response.get("message", response.get("status")))
    )


def _check_admin_permissions(update: Update) -> bool:
    """Check if user has admin permissions.

    Args:
        update: Telegram update object.

    Returns:
        True if user is admin, False otherwise.
    """
    if not update.effective_user or not update.message:
        return False

    if not config.bot.admin_chat_id:
        return False

    return update.effective_user.id == config.bot.admin_chat_id
