"""
Affiliate Assistant
메인 진입점

캠페인 / 아카데미 질의 응답 (단일 쿼리 또는 대화 모드)
"""

import argparse
import asyncio
import json
import sys

from dotenv import load_dotenv

from affiliate_rag.domain.exceptions import EmptyQuery, StoreUnavailable
from affiliate_rag.infrastructure.bootstrap import ApplicationContainer
from affiliate_rag.rag.models import QueryOptions

# 환경 변수 로드
load_dotenv()


async def run_query(query: str, limit: int | None = None, as_json: bool = False) -> int:
    """단일 쿼리 실행"""
    container = await ApplicationContainer.create()
    try:
        if limit is None:
            limit = container.config.result_limit
        options = QueryOptions(result_limit=limit)
        try:
            result = await container.orchestrator.process_query(query, options)
        except EmptyQuery as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2

        if as_json:
            print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2, default=str))
        else:
            print(f"\n🤖 Assistant: {result.response}")
            if result.sources:
                print(f"   [Sources: {', '.join(result.sources)}]")
            print(f"   [confidence={result.confidence:.2f}]")
        return 1 if result.fallback_used else 0
    finally:
        await container.close()


async def describe_status(orchestrator) -> str:
    """상태 출력 문자열 (저장소 장애 시에도 예외 없이 반환)"""
    health = await orchestrator.health_check()
    lines = [f"\n📊 Health: {health['status']} {health['services']}"]
    if health["status"] == "unhealthy":
        lines.append("   Stats: unavailable (record store unreachable)\n")
        return "\n".join(lines)
    try:
        stats = await orchestrator.get_stats()
    except StoreUnavailable as e:
        lines.append(f"   Stats: unavailable ({e})\n")
    else:
        lines.append(f"   Stats: {stats['documents']}\n")
    return "\n".join(lines)


async def run_chat() -> None:
    """대화 모드"""
    container = await ApplicationContainer.create()
    orchestrator = container.orchestrator

    print("\n💬 Assistant ready. Ask me about campaigns and academy resources!\n")

    try:
        while True:
            try:
                user_input = input("You: ").strip()

                if not user_input:
                    continue

                if user_input.lower() == "exit":
                    print("Goodbye!")
                    break

                if user_input.lower() == "help":
                    print_help()
                    continue

                if user_input.lower() == "status":
                    print(await describe_status(orchestrator))
                    continue

                result = await orchestrator.process_query(user_input)
                print(f"\n🤖 Assistant: {result.response}\n")

            except EOFError:
                print("\nGoodbye!")
                break

    except KeyboardInterrupt:
        print("\n\nInterrupted. Goodbye!")
    finally:
        await container.close()


def print_help():
    """도움말 출력"""
    help_text = """
Available Commands:
  exit    - Exit the assistant
  help    - Show this help message
  status  - Show health and corpus stats

Example Questions:
  - What campaigns are available?
  - show me Summer Fashion Sale campaign details
  - tell me about Home & Garden
  - How do I improve my conversion rates?
"""
    print(help_text)


def positive_int(value: str) -> int:
    """--limit 인자 검증 (1 이상의 정수)"""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: '{value}'") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """CLI 파서 생성"""
    parser = argparse.ArgumentParser(
        description="Affiliate Assistant - campaign and academy question answering",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Ask a single question
  python main.py "What campaigns are available?"

  # Machine-readable output
  python main.py "tell me about Home & Garden" --json

  # Start interactive mode
  python main.py --chat
        """,
    )

    parser.add_argument("query", nargs="?", help="Question to answer")
    parser.add_argument("--chat", action="store_true", help="Start interactive mode")
    parser.add_argument("--limit", type=positive_int, help="Maximum number of results")
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON")
    return parser


def main():
    """메인 함수"""
    parser = build_parser()
    args = parser.parse_args()

    if args.chat:
        asyncio.run(run_chat())
    elif args.query:
        sys.exit(asyncio.run(run_query(args.query, limit=args.limit, as_json=args.json)))
    else:
        parser.print_help()
        sys.exit(2)


if __name__ == "__main__":
    main()
