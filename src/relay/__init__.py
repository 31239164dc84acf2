"""Per-call media relay between the Twilio Media Stream and the ElevenLabs agent.

One session bridges exactly two WebSocket legs:
Twilio (carrier leg, accepted by us) <-> ElevenLabs Conversational AI (agent leg, dialed by us).
"""
