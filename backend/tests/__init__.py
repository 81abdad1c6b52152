"""
Mystery Room Backend Test Suite

Test structure:
- unit/: Models, solvers, controller, loader and API in isolation
- integration/: Full room sessions on the bundled portfolio room
- helpers.py: Shared builders (puzzles, room.yaml content, card lookups)

Time is always simulated through the DeferredScheduler, never slept.
"""
