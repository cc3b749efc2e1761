"""WineLens - 와인 리스트 OCR 텍스트를 카탈로그 와인에 매칭"""

__version__ = "1.0.0"
