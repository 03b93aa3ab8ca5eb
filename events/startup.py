from events.base import BaseEvent


class StartupEvent(BaseEvent):
    event_code = "application-started"
    event_title = "Application started"
