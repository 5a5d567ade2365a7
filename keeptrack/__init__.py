# KeepTrack board core: project tracking, optimistic moves, local cache
#
# Components:
#   schema.py   - Data model (Project, ProjectStatus, column titles)
#   errors.py   - Error kinds and tagged Success/Failure results
#   cache.py    - Local cache over key/value storage (memory or SQLite)
#   gateway.py  - REST gateway (requests)
#   reorder.py  - Pure drag-and-drop reorder engine
#   board.py    - Board state controller (optimistic update + rollback)
#   config.py   - YAML/env configuration
#   cli.py      - Text board and move command
