"""
Storage subsystem.

Components:
- files.py: JSON helpers, atomic writes, the ListMapFile aggregate
- records.py: one-file-per-entity RecordStore (tasks, subtasks)
- board.py: BoardIndex (swimlane -> ids)
- links.py: LinkIndex (task -> subtask ids)
- notes.py: NotesIndex (entity -> notes)
"""
