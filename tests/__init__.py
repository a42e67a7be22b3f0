"""TaskTracker Test Suite

Test organization:
- unit/voice/: Voice parser (segmenter, date/time resolvers, classifiers,
  public API), models, config loading, capture controller
- unit/tasks/: Task store and category catalog

Running tests:
    # All tests
    pytest

    # Specific module
    pytest tests/unit/voice/

    # With coverage
    pytest --cov=tasktracker --cov-report=term-missing
"""
