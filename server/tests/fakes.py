"""In-memory collaborators for workflow tests"""

from church_rsvp.errors import DispatchError


class RecordingDispatcher:
    """Notification dispatcher that records every payload it is asked to send"""

    def __init__(self):
        self.sent = []

    async def send(self, payload):
        self.sent.append(payload)


class FailingDispatcher(RecordingDispatcher):
    """Records the attempt, then fails like an unreachable mail provider"""

    async def send(self, payload):
        self.sent.append(payload)
        raise DispatchError(f"Could not send notification to {payload.email}")


class FakeEmailClient:
    def __init__(self, error=None):
        self.error = error
        self.sent = []

    async def send(self, email):
        self.sent.append(email)
        if self.error is not None:
            raise self.error
        return {"id": "<fake@mg.example.org>", "message": "Queued. Thank you."}
