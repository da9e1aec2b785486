"""User-facing message templates and constants.

Contains the progress texts pushed by the traversal engine and the replies of
the Telegram operator bot. Centralizes wording for consistent output across
the status channels.
"""

# Engine progress and errors
NO_FEED_MESSAGE = "No search results found. Please search on Google Maps first."
PROGRESS_PROCESSING = "Processing {count} visible cards…"
PROGRESS_CARD = "Scraping card {index} of {total}…"
PROGRESS_SCROLLING = "Scrolling for more results…"
PROGRESS_STOPPED = "Stopped by user"
FATAL_ERROR_MESSAGE = "Error: {error}"

# Bot commands and descriptions
START_MESSAGE = (
    "Google Maps scraper control.\n\n"
    "/scrape - start collecting the open result list\n"
    "/stop - stop after the current card\n"
    "/status - running state and record count\n"
    "/export csv|excel|json - download collected records\n"
    "/reset - drop collected records"
)

# Command replies
REPLY_STARTED = "▶️ Scraping started"
REPLY_ALREADY_RUNNING = "⏳ Scraping is already running"
REPLY_STOPPED = "⏹ Stop requested. Records so far: {count}"
REPLY_RESET = "🗑 Collected records cleared"
REPLY_RESET_WHILE_RUNNING = "⏳ Stop scraping before resetting ({count} records)"
REPLY_STATUS = "{state_emoji} {state}\nRecords: {count}"
REPLY_NO_DATA = "📭 Nothing to export yet"
REPLY_EXPORT_CAPTION = "📊 {count} places ({format})"
REPLY_BAD_FORMAT = "❌ Unknown format. Use: csv, excel or json"
REPLY_COMMAND_FAILED = "❌ Command failed: {message}"

# Push notifications relayed to the admin chat
PUSH_COUNT = "📍 {count} places collected"
PUSH_COMPLETE = "✅ Done: {count} places scraped"
PUSH_ERROR = "⚠️ {message}"

STATE_EMOJI = {
    "idle": "💤",
    "running": "🔄",
    "stopped": "⏹",
}
