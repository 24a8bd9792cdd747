"""
themebuild CLI - 테마 빌드 파이프라인 실행

사용법:
    # 전체 빌드 (로컬화 → vite build → 템플릿/에셋 처리)
    themebuild build

    # 압축 없는 preview 빌드
    themebuild build --preview

    # 번들러를 따로 실행한 경우 후처리만
    themebuild postbuild

    # 외부 스타일시트 로컬화만
    themebuild localize

    # 번들러 메타데이터(.vite) 정리만
    themebuild clean

종료 코드:
    0: 성공 (degraded 포함)
    1: 치명적 에러
    2: --strict 이고 degraded 단계가 있음
"""

import argparse
import logging
from pathlib import Path

from themebuild.core.config import load_config
from themebuild.core.logging import summarize
from themebuild.domain.constants import CONFIG_FILENAME
from themebuild.domain.errors import PipelineError
from themebuild.domain.schemas import RunReport
from themebuild.pipeline import BuildPipeline

logger = logging.getLogger("themebuild")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="themebuild",
        description="테마 빌드 후처리 파이프라인",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"설정 파일 경로 (기본: <project-root>/{CONFIG_FILENAME})",
    )
    parser.add_argument(
        "--project-root",
        type=Path,
        default=None,
        help="프로젝트 루트 (기본: --config 디렉토리, 없으면 현재 디렉토리)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="매니페스트 누락을 치명적 에러로 처리, degraded 시 종료 코드 2",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="DEBUG 로그 출력",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="로컬화 → 번들러 → 후처리")
    build.add_argument("--preview", action="store_true", help="압축 없는 preview 번들러 명령 사용")
    build.add_argument("--skip-bundler", action="store_true", help="번들러 실행 생략")

    sub.add_parser("localize", help="외부 스타일시트 로컬화만 실행")
    sub.add_parser("postbuild", help="번들러 완료 후 처리만 실행")
    sub.add_parser("clean", help="번들러 메타데이터 디렉토리 삭제")

    return parser


def resolve_config_path(args: argparse.Namespace) -> Path:
    """--config 미지정 시 프로젝트 루트(없으면 cwd)의 themebuild.yaml."""
    if args.config is not None:
        return args.config
    return (args.project_root or Path.cwd()) / CONFIG_FILENAME


def run_command(pipeline: BuildPipeline, args: argparse.Namespace) -> RunReport:
    if args.command == "build":
        return pipeline.build(preview=args.preview, skip_bundler=args.skip_bundler)
    if args.command == "localize":
        return pipeline.localize()
    if args.command == "postbuild":
        return pipeline.postbuild()
    return pipeline.clean()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )

    try:
        config = load_config(resolve_config_path(args), project_root=args.project_root)
    except PipelineError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    if args.strict:
        config.strict = True

    pipeline = BuildPipeline(config)
    try:
        report = run_command(pipeline, args)
    except PipelineError as e:
        if pipeline.last_report is not None:
            logger.error(summarize(pipeline.last_report))
        logger.error(f"Build aborted: {e}")
        return 1

    logger.info(summarize(report))
    for warning in report.warnings[:10]:
        logger.warning(f"  - [{warning.phase}] {warning.code}: {warning.message} ({warning.target})")

    if config.strict and report.degraded:
        return 2
    return 0
