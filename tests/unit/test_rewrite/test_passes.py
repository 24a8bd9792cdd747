"""
test_passes.py - 템플릿 재작성 pass 테스트

DoD:
- 각 pass 치환 결과
- 멱등성: pass를 다시 적용해도 결과 동일 (중복 prefix 없음)
- 관련 없는 <{ }> 내용은 건드리지 않음
- 매니페스트 정보 없음 → css/js pass 건너뜀
"""

import pytest

from themebuild.rewrite.passes import (
    PASSES,
    RewriteContext,
    apply_passes,
    rewrite_assets,
    rewrite_css,
    rewrite_includes,
    rewrite_js,
    theme_relative,
)


@pytest.fixture
def ctx() -> RewriteContext:
    """매니페스트가 로드된 컨텍스트."""
    return RewriteContext(
        stylesheet="style.css",
        script="assets/js/main.9f8.js",
        stylesheet_name="style.css",
        script_stem="main",
    )


# =============================================================================
# css pass
# =============================================================================

class TestCssPass:

    def test_path_after_other_placeholder_untouched(self, ctx):
        """<{$xoops_themecss}>css/style.css 는 이중 prefix 하지 않음."""
        content = '<link href="<{$xoops_themecss}>css/style.css"><link href="<{$xoops_url}>style.css">'

        assert rewrite_css(content, ctx) == content

    def test_bare_stylesheet(self, ctx):
        content = '<link rel="stylesheet" href="style.css">'

        assert rewrite_css(content, ctx) == '<link rel="stylesheet" href="<{theme_css}>style.css">'

    def test_relative_css_dir(self, ctx):
        """css/<name>.css, ./css/, ../css/ 모두 치환."""
        content = 'href="css/theme.css" href="./css/a.css" href="../css/b.min.css"'

        result = rewrite_css(content, ctx)

        assert result == (
            'href="<{theme_css}>style.css" '
            'href="<{theme_css}>style.css" '
            'href="<{theme_css}>style.css"'
        )

    def test_refreshes_existing_placeholder(self, ctx):
        """이미 placeholder가 붙은 이전 경로 → 새 경로."""
        content = 'href="<{theme_css}>assets/style.OLD.css"'

        assert rewrite_css(content, ctx) == 'href="<{theme_css}>style.css"'

    def test_collapses_double_prefix(self, ctx):
        content = 'href="<{theme_css}><{theme_css}>style.css"'

        assert rewrite_css(content, ctx) == 'href="<{theme_css}>style.css"'

    def test_idempotent(self, ctx):
        once = rewrite_css('href="css/theme.css"', ctx)

        assert rewrite_css(once, ctx) == once

    def test_remote_urls_untouched(self, ctx):
        """원격 URL 안의 css/ 경로는 치환하지 않음."""
        content = 'href="https://cdn.example.com/css/bootstrap.css" href="https://x.io/style.css"'

        assert rewrite_css(content, ctx) == content

    def test_resolved_hashed_stylesheet(self):
        ctx = RewriteContext(stylesheet="assets/style.DEF.css")

        once = rewrite_css('href="style.css"', ctx)

        assert once == 'href="<{theme_css}>assets/style.DEF.css"'
        assert rewrite_css(once, ctx) == once


# =============================================================================
# js pass
# =============================================================================

class TestJsPass:

    def test_literal_script_name(self, ctx):
        content = '<script type="module" src="main.js"></script>'

        assert rewrite_js(content, ctx) == (
            '<script type="module" src="<{theme_js}>assets/js/main.9f8.js"></script>'
        )

    def test_js_dir_and_hashed_name(self, ctx):
        content = 'src="js/main.js" src="./main.OLDHASH.js"'

        assert rewrite_js(content, ctx) == (
            'src="<{theme_js}>assets/js/main.9f8.js" src="<{theme_js}>assets/js/main.9f8.js"'
        )

    def test_refreshes_existing_placeholder(self, ctx):
        content = 'src="<{theme_js}>assets/js/main.1a2b.js"'

        assert rewrite_js(content, ctx) == 'src="<{theme_js}>assets/js/main.9f8.js"'

    def test_path_after_other_placeholder_untouched(self, ctx):
        content = '<script src="<{$xoops_url}>js/main.js"></script>'

        assert rewrite_js(content, ctx) == content

    def test_other_scripts_untouched(self, ctx):
        content = 'src="domain.js" src="vendor/main.js" src="mainframe.js"'

        assert rewrite_js(content, ctx) == content

    def test_idempotent(self, ctx):
        once = rewrite_js('src="main.js"', ctx)

        assert rewrite_js(once, ctx) == once


# =============================================================================
# assets pass
# =============================================================================

class TestAssetsPass:

    def test_img_path_drops_directory(self, ctx):
        content = '<img src="img/logo.png">'

        assert rewrite_assets(content, ctx) == '<img src="<{theme_img}>logo.png">'

    def test_applied_twice_single_prefix(self, ctx):
        """두 번 적용해도 prefix는 하나."""
        once = rewrite_assets('<img src="img/logo.png">', ctx)
        twice = rewrite_assets(once, ctx)

        assert twice == once == '<img src="<{theme_img}>logo.png">'

    def test_fonts_and_nested_dirs(self, ctx):
        content = "url('../fonts/roboto.woff2') url(img/icons/arrow.svg)"

        assert rewrite_assets(content, ctx) == (
            "url('<{theme_img}>roboto.woff2') url(<{theme_img}>arrow.svg)"
        )

    def test_prefixed_directory_path(self, ctx):
        """placeholder 뒤에 디렉토리가 남아 있으면 정리."""
        content = 'src="<{theme_img}>img/logo.png"'

        assert rewrite_assets(content, ctx) == 'src="<{theme_img}>logo.png"'

    def test_collapses_double_prefix(self, ctx):
        content = 'src="<{theme_img}><{theme_img}>logo.png"'

        assert rewrite_assets(content, ctx) == 'src="<{theme_img}>logo.png"'

    def test_unknown_extension_untouched(self, ctx):
        content = 'href="img/readme.txt" src="https://cdn.example.com/img/a.png"'

        assert rewrite_assets(content, ctx) == content

    def test_uppercase_extension(self, ctx):
        assert rewrite_assets('src="img/PHOTO.JPG"', ctx) == 'src="<{theme_img}>PHOTO.JPG"'

    def test_path_after_other_placeholder_untouched(self, ctx):
        """다른 <{ }> 토큰 바로 뒤의 경로는 이미 절대 경로로 간주."""
        content = '<img src="<{$xoops_imageurl}>img/logo.png">'

        assert rewrite_assets(content, ctx) == content


# =============================================================================
# include pass
# =============================================================================

class TestIncludePass:

    def test_literal_path(self, ctx):
        content = '<{include file="templates/blocks/foo.tpl"}>'

        assert rewrite_includes(content, ctx) == '<{include file="$theme_name/blocks/foo.tpl"}>'

    def test_variable_reference_untouched(self, ctx):
        """$ 변수 참조는 그대로, 다시 적용해도 그대로."""
        content = '<{include file="$theme_name/blocks/foo.tpl"}>'

        once = rewrite_includes(content, ctx)

        assert once == content
        assert rewrite_includes(once, ctx) == once

    def test_idempotent_after_rewrite(self, ctx):
        once = rewrite_includes('<{include file="templates/blocks/foo.tpl"}>', ctx)

        assert rewrite_includes(once, ctx) == once

    def test_attribute_order(self, ctx):
        """file 속성 앞뒤의 다른 속성 유지."""
        content = "<{include assign=block file='modules/news/templates/blocks/item.tpl' cache=1}>"

        assert rewrite_includes(content, ctx) == (
            "<{include assign=block file='$theme_name/blocks/item.tpl' cache=1}>"
        )

    def test_last_templates_segment(self, ctx):
        content = '<{include file="templates/modules/templates/x.tpl"}>'

        assert rewrite_includes(content, ctx) == '<{include file="$theme_name/x.tpl"}>'

    def test_without_templates_segment(self, ctx):
        """templates 세그먼트가 없는 경로(db: 리소스 등)는 그대로."""
        content = '<{include file="db:system_block.tpl"}>'

        assert rewrite_includes(content, ctx) == content

    def test_unrelated_tags_untouched(self, ctx):
        """다른 <{ }> 태그의 file 속성은 건드리지 않음."""
        content = (
            '<{foreach item=block from=$blocks}><{/foreach}>'
            '<{assign var=file value="templates/x.tpl"}>'
            '<{include file="templates/blocks/a.tpl"}>'
        )

        result = rewrite_includes(content, ctx)

        assert result == (
            '<{foreach item=block from=$blocks}><{/foreach}>'
            '<{assign var=file value="templates/x.tpl"}>'
            '<{include file="$theme_name/blocks/a.tpl"}>'
        )

    def test_custom_theme_variable(self):
        ctx = RewriteContext(theme_variable="xoTheme")

        assert rewrite_includes('<{include file="templates/a.tpl"}>', ctx) == (
            '<{include file="$xoTheme/a.tpl"}>'
        )


def test_theme_relative():
    assert theme_relative("templates/blocks/foo.tpl") == "blocks/foo.tpl"
    assert theme_relative("a/templates/b/templates/c.tpl") == "c.tpl"
    assert theme_relative("mytemplates/c.tpl") is None
    assert theme_relative("templates/") is None


# =============================================================================
# apply_passes
# =============================================================================

SAMPLE = """<link rel="stylesheet" href="style.css">
<script src="main.js"></script>
<img src="img/logo.png"><img src="<{theme_img}>already.png">
<{include file="templates/blocks/header.tpl"}>
<{$xoops_sitename}>
"""


class TestApplyPasses:

    def test_order(self):
        assert [p.name for p in PASSES] == ["css", "js", "assets", "include"]

    def test_full_sequence(self, ctx):
        outcome = apply_passes(SAMPLE, ctx)

        assert outcome.applied == ["css", "js", "assets", "include"]
        assert outcome.skipped == []
        assert outcome.content == """<link rel="stylesheet" href="<{theme_css}>style.css">
<script src="<{theme_js}>assets/js/main.9f8.js"></script>
<img src="<{theme_img}>logo.png"><img src="<{theme_img}>already.png">
<{include file="$theme_name/blocks/header.tpl"}>
<{$xoops_sitename}>
"""
        assert {r.kind for r in outcome.changed_references} == {"css", "js", "asset", "include"}

    def test_full_sequence_idempotent(self, ctx):
        """전체 pass를 결과에 다시 적용해도 변화 없음."""
        once = apply_passes(SAMPLE, ctx).content
        again = apply_passes(once, ctx)

        assert again.content == once
        assert again.changed_references == []

    def test_without_manifest(self):
        """stylesheet/script 없음 → css/js pass 건너뜀, 나머지는 실행."""
        outcome = apply_passes(SAMPLE, RewriteContext())

        assert outcome.skipped == ["css", "js"]
        assert outcome.applied == ["assets", "include"]
        assert 'href="style.css"' in outcome.content
        assert 'src="main.js"' in outcome.content
        assert '<img src="<{theme_img}>logo.png">' in outcome.content
        assert 'file="$theme_name/blocks/header.tpl"' in outcome.content
