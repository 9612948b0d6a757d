"""
Assistant Logger
어시스턴트 쿼리 처리 로깅 및 감사(audit) 기록
"""

import json
import logging
import re
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any


class SensitiveDataFilter(logging.Filter):
    """
    API 키 및 민감 정보를 마스킹하는 로깅 필터

    마스킹 대상:
    - OpenAI API Key (sk-...)
    - Supabase anon/service key (JWT, eyJ...)
    - Bearer 토큰
    - 일반 api_key/token/secret/password 패턴
    """

    PATTERNS = [
        (r"sk-[a-zA-Z0-9_\-]{20,}", "sk-****"),
        (r"eyJ[a-zA-Z0-9_\-]{10,}\.[a-zA-Z0-9_\-]{10,}\.[a-zA-Z0-9_\-]{10,}", "eyJ****"),
        (r"Bearer\s+[a-zA-Z0-9_\-\.]{20,}", "Bearer ****"),
        (
            r'(?i)(api[_-]?key|apikey|token|secret|password)["\']?\s*[:=]\s*["\']?([a-zA-Z0-9_\-]{16,})["\']?',
            r"\1=****",
        ),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        """메시지와 포맷팅 인자 마스킹 (로그는 항상 통과)"""
        if record.msg:
            record.msg = self.mask(str(record.msg))

        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: self._mask_value(v) for k, v in record.args.items()}
            elif isinstance(record.args, tuple):
                record.args = tuple(self._mask_value(arg) for arg in record.args)

        return True

    @classmethod
    def mask(cls, text: str) -> str:
        for pattern, replacement in cls.PATTERNS:
            text = re.sub(pattern, replacement, text)
        return text

    def _mask_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return self.mask(value)
        if isinstance(value, dict):
            return {k: self._mask_value(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return type(value)(self._mask_value(item) for item in value)
        return value


class AssistantLogger:
    """
    어시스턴트 로거

    Console + daily file handlers with sensitive-data masking, plus JSON
    Lines audit records for every processed query.
    """

    FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

    def __init__(self, name: str = "affiliate_assistant", log_dir: str | Path = "./logs"):
        self.name = name
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self._setup_logger()

    def _setup_logger(self) -> None:
        """로거 설정"""
        self.logger = logging.getLogger(self.name)
        self.logger.setLevel(logging.DEBUG)

        # 기존 핸들러 제거
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        sensitive_filter = SensitiveDataFilter()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(logging.Formatter(self.FORMAT, datefmt="%H:%M:%S"))
        console_handler.addFilter(sensitive_filter)
        self.logger.addHandler(console_handler)

        today = datetime.now().strftime("%Y-%m-%d")
        file_handler = logging.FileHandler(
            self.log_dir / f"{self.name}_{today}.log", encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(self.FORMAT))
        file_handler.addFilter(sensitive_filter)
        self.logger.addHandler(file_handler)

    def _format_extra(self, extra: dict | None) -> str:
        if not extra:
            return ""
        return f" | {json.dumps(extra, ensure_ascii=False, default=str)}"

    def debug(self, message: str, extra: dict | None = None) -> None:
        self.logger.debug(f"{message}{self._format_extra(extra)}")

    def info(self, message: str, extra: dict | None = None) -> None:
        self.logger.info(f"{message}{self._format_extra(extra)}")

    def warning(self, message: str, extra: dict | None = None) -> None:
        self.logger.warning(f"{message}{self._format_extra(extra)}")

    def error(self, message: str, extra: dict | None = None, exc_info: bool = False) -> None:
        self.logger.error(f"{message}{self._format_extra(extra)}", exc_info=exc_info)

    # =========================================================================
    # 쿼리 감사 로깅
    # =========================================================================

    def query_request(self, query: str, session_id: str | None = None) -> dict[str, Any]:
        """
        쿼리 처리 시작 로깅

        Returns:
            request_context: query_response에 전달할 컨텍스트
        """
        context = {
            "request_id": f"query_{int(time.time() * 1000)}",
            "session_id": session_id,
            "query": query[:100] + "..." if len(query) > 100 else query,
            "start_time": time.time(),
            "timestamp": datetime.now().isoformat(),
        }
        self.info("Query Request", {k: v for k, v in context.items() if k != "start_time"})
        return context

    def query_response(self, request_context: dict[str, Any], result: Any) -> None:
        """
        쿼리 처리 완료 로깅 (감사 파일에 별도 기록)

        Args:
            request_context: query_request에서 반환된 컨텍스트
            result: QueryResult
        """
        start_time = request_context.get("start_time", time.time())
        latency_ms = (time.time() - start_time) * 1000

        audit_record = {
            "request_id": request_context.get("request_id"),
            "session_id": request_context.get("session_id"),
            "timestamp": datetime.now().isoformat(),
            "query": request_context.get("query"),
            "latency_ms": round(latency_ms, 1),
            "matched_records": len(result.matched_records),
            "sources": result.sources,
            "is_exact_match": result.is_exact_match,
            "confidence": round(result.confidence, 3),
            "fallback_used": result.fallback_used,
            "error": result.error,
        }

        if result.fallback_used:
            self.warning(f"Query Fallback | {result.error}", audit_record)
        else:
            self.info(
                f"Query Response | {latency_ms:.0f}ms | "
                f"{len(result.matched_records)} records | confidence={result.confidence:.2f}",
                audit_record,
            )

        self._write_audit_log(audit_record)

    def _write_audit_log(self, record: dict[str, Any]) -> None:
        """감사 로그 파일에 JSON Lines 형식으로 기록"""
        today = datetime.now().strftime("%Y-%m-%d")
        audit_file = self.log_dir / f"assistant_audit_{today}.jsonl"
        try:
            with open(audit_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")
        except OSError as e:
            self.warning(f"Failed to write audit log: {e}")
