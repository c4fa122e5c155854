"""PlayForFun: private sports-prediction contests organised in spaces."""

__version__ = "1.0.0"
