"""
L4 Execution — installers and file writers.

Every public installer returns a ``Receipt`` and never raises.
Every mutating subprocess call goes through ``subprocess_runner``;
read-only queries may call ``subprocess.run`` directly.
"""
