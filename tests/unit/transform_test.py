"""End-to-end tests for ``transform_source`` on single files."""

import logging

import pytest

from image_codemod.core.errors import HostSyntaxError, QuerySyntaxError
from image_codemod.core.transform import transform_source
from image_codemod.models import NoticeKind


def test_irrelevant_file_is_returned_verbatim() -> None:
    text = 'import React from "react"\n\nexport const Title = () => <h1  className="t">Hi</h1>\n'
    result = transform_source(text, "src/components/Title.js")
    assert result.changed is False
    assert result.source == text
    assert result.notices == []


def test_already_migrated_file_is_unchanged(migrated_component: str) -> None:
    result = transform_source(migrated_component, "src/pages/index.js")
    assert result.changed is False
    assert result.source == migrated_component


def test_legacy_component_is_migrated(legacy_component: str) -> None:
    result = transform_source(legacy_component, "src/pages/index.js")
    assert result.changed is True
    assert 'import { GatsbyImage } from "gatsby-plugin-image"\n' in result.source
    assert "gatsby-image" not in result.source
    assert '<GatsbyImage image={data.file.childImageSharp.gatsbyImageData} alt="Hero" />' in result.source
    assert "gatsbyImageData(maxWidth: 800, layout: FLUID)" in result.source
    assert "GatsbyImageSharpFluid" not in result.source
    assert result.source.endswith("  }\n`\n")
    assert result.notices == []


def test_untouched_regions_are_preserved(legacy_component: str) -> None:
    result = transform_source(legacy_component, "src/pages/index.js")
    assert result.source.startswith('import React from "react"\nimport { graphql } from "gatsby"\n')
    assert "export default function Hero({ data }) {\n  return (\n    <main>\n      <GatsbyImage" in result.source
    assert "\n    </main>\n  )\n}\n\nexport const query = graphql`\n  query HeroQuery {\n" in result.source


def test_migrated_output_is_stable(legacy_component: str) -> None:
    once = transform_source(legacy_component, "src/pages/index.js")
    twice = transform_source(once.source, "src/pages/index.js")
    assert twice.changed is False
    assert twice.source == once.source


def test_import_and_simple_element() -> None:
    text = 'import Img from "gatsby-image"\n\nexport const Hero = ({ data }) => <Img fluid={data.childImageSharp.fluid} />\n'
    result = transform_source(text, "Hero.js")
    assert result.source == (
        'import { GatsbyImage } from "gatsby-plugin-image"\n\n'
        "export const Hero = ({ data }) => <GatsbyImage image={data.childImageSharp.gatsbyImageData} />\n"
    )


def test_optional_chaining_is_preserved() -> None:
    text = 'import Img from "gatsby-image"\nconst Card = ({ data }) => <Img fixed={data?.childImageSharp?.fixed} />\n'
    result = transform_source(text, "Card.jsx")
    assert result.source == (
        'import { GatsbyImage } from "gatsby-plugin-image"\n'
        "const Card = ({ data }) => <GatsbyImage image={data?.childImageSharp?.gatsbyImageData} />\n"
    )


def test_import_keeps_quote_style_and_semicolon() -> None:
    text = "import Image from 'gatsby-image/withIEPolyfill';\nexport default Image;\n"
    result = transform_source(text, "image.js")
    assert result.source.startswith("import { GatsbyImage } from 'gatsby-plugin-image';\n")


def test_compat_module_is_recognised() -> None:
    text = 'import { GatsbyImage as Img } from "gatsby-plugin-image/compat"\nconst a = <Img fixed={x.fixed} />\n'
    result = transform_source(text, "a.js")
    assert result.source == (
        'import { GatsbyImage } from "gatsby-plugin-image"\nconst a = <GatsbyImage image={x.gatsbyImageData} />\n'
    )


def test_side_effect_import_has_no_references() -> None:
    result = transform_source('import "gatsby-image"\nconsole.log(1)\n', "a.js")
    assert result.changed is True
    assert result.source == 'import { GatsbyImage } from "gatsby-plugin-image"\nconsole.log(1)\n'
    assert result.notices == []


def test_standalone_member_access_is_rewritten() -> None:
    text = "const src = data.file.childImageSharp.fixed.src\nconst other = data.fixed\n"
    result = transform_source(text, "a.js")
    assert result.source == (
        "const src = data.file.childImageSharp.gatsbyImageData.src\nconst other = data.fixed\n"
    )


def test_rewrites_made_before_the_import_are_absorbed() -> None:
    text = 'const A = () => <Img fluid={data.childImageSharp.fluid} />\nimport Img from "gatsby-image"\n'
    result = transform_source(text, "a.js")
    assert result.source == (
        "const A = () => <GatsbyImage image={data.childImageSharp.gatsbyImageData} />\n"
        'import { GatsbyImage } from "gatsby-plugin-image"\n'
    )


def test_tagged_query_in_typescript_component() -> None:
    text = (
        'import Img from "gatsby-image"\n'
        "type Props = { data: any }\n"
        "export const Logo = ({ data }: Props) => <Img fixed={data.logo.childImageSharp.fixed} />\n"
        "export const query = graphql`query Logo { logo: file { childImageSharp { fixed { "
        "...GatsbyImageSharpFixed_noBase64 } } } }`\n"
    )
    result = transform_source(text, "Logo.tsx")
    assert "type Props = { data: any }\n" in result.source
    assert "<GatsbyImage image={data.logo.childImageSharp.gatsbyImageData} />" in result.source
    assert "gatsbyImageData(layout: FIXED, placeholder: NONE)" in result.source


def test_call_form_query_with_interpolation() -> None:
    text = (
        "export const query = graphql(`query Cover { file { childImageSharp { fluid { "
        "...GatsbyImageSharpFluid_tracedSVG } } } } ${Fragment}`)\n"
    )
    result = transform_source(text, "a.js")
    assert result.changed is True
    assert "gatsbyImageData(layout: FLUID, placeholder: TRACED_SVG)" in result.source
    assert result.source.endswith(" ${Fragment}`)\n")


def test_other_tags_are_ignored() -> None:
    text = "const q = gql`query { a { childImageSharp { fixed { ...GatsbyImageSharpFixed } } } }`\n"
    result = transform_source(text, "a.js")
    assert result.changed is False


def test_malformed_query_aborts_the_file() -> None:
    text = 'import Img from "gatsby-image"\nexport const query = graphql`query { file { `\n'
    with pytest.raises(QuerySyntaxError, match="src/pages/broken.js"):
        transform_source(text, "src/pages/broken.js")


def test_host_syntax_error_carries_path() -> None:
    with pytest.raises(HostSyntaxError) as exc_info:
        transform_source("export default function ( {\n", "src/pages/bad.js")
    assert exc_info.value.path == "src/pages/bad.js"


def test_opaque_expression_is_passed_through_with_notice(caplog: pytest.LogCaptureFixture) -> None:
    text = 'import Img from "gatsby-image"\nconst a = <Img fluid={getImageProps()} />\n'
    with caplog.at_level(logging.WARNING):
        result = transform_source(text, "src/a.js")
    assert "<GatsbyImage image={getImageProps()} />" in result.source
    assert [n.kind for n in result.notices] == [NoticeKind.OPAQUE_EXPRESSION]
    assert result.notices[0].line == 2
    assert "src/a.js" in caplog.text
