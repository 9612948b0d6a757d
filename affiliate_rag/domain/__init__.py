"""
Domain Layer
============
엔티티, 예외, Protocol 정의 (외부 의존성 없음)
"""
