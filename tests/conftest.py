import os
import sys


# Put the repository root on sys.path so tests can import `apps.cli` and
# `redis_repl` straight from a checkout, without an editable install.
_REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)
