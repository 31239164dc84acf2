from __future__ import annotations

from dataclasses import dataclass

from config.settings import get_settings


class TwilioConfigError(ValueError):
    pass


@dataclass(frozen=True)
class TwilioConfig:
    account_sid: str
    auth_token: str
    from_number: str
    public_base_url: str


def get_twilio_config() -> TwilioConfig:
    settings = get_settings()
    if not settings.twilio_account_sid or not settings.twilio_auth_token:
        raise TwilioConfigError("Twilio credentials are not configured")
    if not settings.twilio_from_number:
        raise TwilioConfigError("TWILIO_PHONE_NUMBER is not configured")

    return TwilioConfig(
        account_sid=settings.twilio_account_sid,
        auth_token=settings.twilio_auth_token,
        from_number=settings.twilio_from_number,
        public_base_url=settings.public_base_url.rstrip("/"),
    )


def build_twilio_client():
    from twilio.rest import Client

    cfg = get_twilio_config()
    return Client(cfg.account_sid, cfg.auth_token)


class OutboundCaller:
    """Places outbound calls that are answered by our inbound TwiML webhook."""

    def __init__(self, client=None, cfg: TwilioConfig | None = None) -> None:
        self._client = client
        self._cfg = cfg

    def _resolve(self):
        if self._cfg is None:
            self._cfg = get_twilio_config()
        if self._client is None:
            self._client = build_twilio_client()
        return self._client, self._cfg

    def place_call(self, to_number: str) -> str:
        client, cfg = self._resolve()
        call = client.calls.create(
            to=to_number,
            from_=cfg.from_number,
            url=f"{cfg.public_base_url}/incoming-call-eleven",
            method="POST",
        )
        return str(call.sid)
