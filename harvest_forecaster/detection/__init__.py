"""
Detection boundary — turning upstream vision-model output into a
``DetectionResult``.

Modules:
  builder   — counts or bounding boxes → DetectionResult, growth-stage label.
  fixtures  — deterministic sample detection for mock-data mode.
"""
