# REPL engine
#
# This package holds everything between a typed line and a rendered reply.
#
# Key components:
#   - tokenizer.py   Splits a line into shell-like tokens
#   - vocabulary.py  Command names the server understands
#   - types.py       Reply, handler and session-context types
#   - registry.py    Maps command names to handlers (remote + meta-commands)
#   - output.py      Renders replies for the terminal
#   - connection.py  Connection state machine around the redis client
#   - repl.py        The read-eval-print loop
