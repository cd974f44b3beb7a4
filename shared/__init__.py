"""
shared – tiny helpers imported by every service package
-------------------------------------------------------
Modules
-------
config.py         → loads `.env` once per process, builds `Settings`
logging.py        → consistent JSON/stdout logger + structured events
constants.py      → fixed trading parameters, Redis key names
errors.py         → ConfigError / ValidationError / ProtocolError / …
redis_client.py   → optional lazy Redis + heartbeat / status / pause flag
utils.py          → numeric coercion shared by the parsers
"""
