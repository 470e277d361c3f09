"""Static metadata describing LiveQA."""

APP_NAME = "LiveQA"
APP_VERSION = "0.1"
APP_ABOUT_TEXT = (
    "LiveQA runs live audience sessions: the host posts questions, participants answer "
    "anonymously from their phones, and the answers are shown as a word cloud."
)
