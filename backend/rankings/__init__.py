"""
Restaurant ranking engine.

Responsibilities:
- Derive per-restaurant sentiment metrics and the volume-boosted overall score.
- Filter, sort and paginate restaurants into global rank positions.
- Build fixed-category top lists behind a reliability floor.
"""
