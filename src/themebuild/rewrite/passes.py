"""
템플릿 재작성 pass: (content, context) -> content

순서 규칙 (PASSES 순서 고정):
1. css    : 스타일시트 참조 → <{theme_css}>resolved.css
2. js     : 컴파일된 스크립트 파일명 → <{theme_js}>assets/js/main.HASH.js
3. assets : img/, fonts/ 상대 경로 → <{theme_img}>basename
4. include: <{include file="…/templates/x.tpl"}> → file="$theme_name/x.tpl"

- 뒤 pass의 패턴이 앞 pass 결과를 다시 매치할 수 있으므로 순서 변경 금지
- 모든 pass는 멱등: 이미 placeholder가 붙은 참조는 같은 형태로 정규화될 뿐
  다시 prefix되지 않는다 (중복 prefix는 하나로 합침)
- css/js pass는 매니페스트가 있어야 실행 (없으면 건너뜀)
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import lru_cache

from themebuild.domain.constants import ASSET_EXTENSIONS, RIGHT_DELIMITER, placeholder
from themebuild.domain.schemas import AssetReference

Rule = tuple[re.Pattern[str], Callable[[re.Match[str]], str]]

# 참조 바로 앞에 올 수 없는 문자 (경로/URL 중간, 다른 placeholder 직후)
_NOT_IN_PATH = rf"(?<![\w./-])(?<!{re.escape(RIGHT_DELIMITER)})"
_PATH_END = r"(?![\w.-])"
_REL_PREFIX = r"(?:\.{1,2}/)*"
# placeholder 뒤 경로 문자 (따옴표, 공백, 태그/delimiter 경계 제외)
_PREFIXED_CHARS = r"[^\"'\s<>{}]*?"


# =============================================================================
# Context
# =============================================================================


@dataclass(frozen=True)
class RewriteContext:
    """
    pass 실행 컨텍스트 (순수 데이터).

    stylesheet/script가 None이면 해당 pass는 건너뛴다.
    """
    stylesheet: str | None = None  # resolved css 경로
    script: str | None = None  # resolved js 경로 (assets/js/main.HASH.js)
    stylesheet_name: str = "style.css"  # 소스에 적힌 스타일시트 파일명
    script_stem: str = "main"  # 소스에 적힌 스크립트 파일명 (확장자 제외)
    css_token: str = "theme_css"
    js_token: str = "theme_js"
    img_token: str = "theme_img"
    theme_variable: str = "theme_name"


# =============================================================================
# Rules
# =============================================================================


@lru_cache(maxsize=32)
def _css_pattern(token: str, stylesheet_name: str) -> re.Pattern[str]:
    prefix = re.escape(placeholder(token))
    return re.compile(
        rf"(?:{prefix})+{_PREFIXED_CHARS}\.css{_PATH_END}"
        rf"|{_NOT_IN_PATH}{_REL_PREFIX}css/[\w.-]+\.css{_PATH_END}"
        rf"|{_NOT_IN_PATH}{_REL_PREFIX}{re.escape(stylesheet_name)}{_PATH_END}"
    )


def css_rule(ctx: RewriteContext) -> Rule:
    replacement = f"{placeholder(ctx.css_token)}{ctx.stylesheet}"
    return _css_pattern(ctx.css_token, ctx.stylesheet_name), lambda m: replacement


@lru_cache(maxsize=32)
def _js_pattern(token: str, stem: str) -> re.Pattern[str]:
    prefix = re.escape(placeholder(token))
    return re.compile(
        rf"(?:{prefix})+{_PREFIXED_CHARS}\.js{_PATH_END}"
        rf"|{_NOT_IN_PATH}{_REL_PREFIX}(?:js/)?{re.escape(stem)}(?:\.[\w-]+)?\.js{_PATH_END}"
    )


def js_rule(ctx: RewriteContext) -> Rule:
    replacement = f"{placeholder(ctx.js_token)}{ctx.script}"
    return _js_pattern(ctx.js_token, ctx.script_stem), lambda m: replacement


@lru_cache(maxsize=8)
def _asset_pattern(token: str) -> re.Pattern[str]:
    prefix = re.escape(placeholder(token))
    extensions = "|".join(sorted(ASSET_EXTENSIONS, key=len, reverse=True))
    filename = rf"[\w.-]+\.(?i:{extensions}){_PATH_END}"
    directory = rf"{_REL_PREFIX}(?:img|fonts)/(?:[\w.-]+/)*"
    return re.compile(
        rf"(?:{prefix})+{directory}(?P<prefixed>{filename})"
        rf"|(?:{prefix}){{2,}}(?P<doubled>{filename})"
        rf"|{_NOT_IN_PATH}{directory}(?P<name>{filename})"
    )


def asset_rule(ctx: RewriteContext) -> Rule:
    token = placeholder(ctx.img_token)

    def repl(m: re.Match[str]) -> str:
        name = m.group("name") or m.group("prefixed") or m.group("doubled")
        return f"{token}{name}"

    return _asset_pattern(ctx.img_token), repl


INCLUDE_PATTERN = re.compile(
    r"(?P<head><\{-?\s*include\b(?:(?!\}>).)*?\bfile\s*=\s*)"
    r"(?P<quote>[\"'])(?P<path>[^\"'$][^\"']*)(?P=quote)",
    re.DOTALL,
)


def theme_relative(path: str) -> str | None:
    """
    마지막 'templates' 세그먼트 뒤의 경로.

    templates/blocks/foo.tpl → blocks/foo.tpl
    세그먼트가 없거나 뒤가 비어 있으면 None.
    """
    parts = path.split("/")
    indices = [i for i, part in enumerate(parts) if part == "templates"]
    if not indices:
        return None
    suffix = "/".join(parts[indices[-1] + 1:])
    return suffix or None


def include_rule(ctx: RewriteContext) -> Rule:
    variable = f"${ctx.theme_variable}"

    def repl(m: re.Match[str]) -> str:
        suffix = theme_relative(m.group("path"))
        if suffix is None:
            return m.group(0)
        quote = m.group("quote")
        return f"{m.group('head')}{quote}{variable}/{suffix}{quote}"

    return INCLUDE_PATTERN, repl


# =============================================================================
# Pass registry
# =============================================================================


@dataclass(frozen=True)
class RewritePass:
    """이름 있는 순수 변환 pass."""
    name: str
    kind: str
    rule: Callable[[RewriteContext], Rule]
    requires: tuple[str, ...] = field(default=())  # 필요한 context 속성

    def available(self, ctx: RewriteContext) -> bool:
        return all(getattr(ctx, attr) for attr in self.requires)

    def apply(self, content: str, ctx: RewriteContext) -> str:
        pattern, repl = self.rule(ctx)
        return pattern.sub(repl, content)

    def references(self, content: str, ctx: RewriteContext) -> list[AssetReference]:
        pattern, repl = self.rule(ctx)
        return [
            AssetReference(
                kind=self.kind,
                original=m.group(0),
                replacement=repl(m),
                start=m.start(),
            )
            for m in pattern.finditer(content)
        ]


PASSES: tuple[RewritePass, ...] = (
    RewritePass("css", "css", css_rule, requires=("stylesheet",)),
    RewritePass("js", "js", js_rule, requires=("script",)),
    RewritePass("assets", "asset", asset_rule),
    RewritePass("include", "include", include_rule),
)


def rewrite_css(content: str, ctx: RewriteContext) -> str:
    return PASSES[0].apply(content, ctx)


def rewrite_js(content: str, ctx: RewriteContext) -> str:
    return PASSES[1].apply(content, ctx)


def rewrite_assets(content: str, ctx: RewriteContext) -> str:
    return PASSES[2].apply(content, ctx)


def rewrite_includes(content: str, ctx: RewriteContext) -> str:
    return PASSES[3].apply(content, ctx)


@dataclass
class RewriteOutcome:
    """apply_passes() 결과."""
    content: str
    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    references: list[AssetReference] = field(default_factory=list)

    @property
    def changed_references(self) -> list[AssetReference]:
        return [r for r in self.references if r.changed]


def apply_passes(
    content: str,
    ctx: RewriteContext,
    passes: tuple[RewritePass, ...] = PASSES,
) -> RewriteOutcome:
    """
    pass를 순서대로 적용.

    실행 조건을 만족하지 않는 pass(예: 매니페스트 없음)는 skipped에 기록.

    Args:
        content: 원본 텍스트
        ctx: RewriteContext
        passes: 적용할 pass 목록 (순서 유지)

    Returns:
        RewriteOutcome
    """
    outcome = RewriteOutcome(content=content)
    for rewrite_pass in passes:
        if not rewrite_pass.available(ctx):
            outcome.skipped.append(rewrite_pass.name)
            continue
        outcome.references.extend(rewrite_pass.references(outcome.content, ctx))
        outcome.content = rewrite_pass.apply(outcome.content, ctx)
        outcome.applied.append(rewrite_pass.name)
    return outcome
