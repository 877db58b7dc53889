"""Shared fixtures and helpers for tests."""

from pathlib import Path

import pytest
from tree_sitter import Parser
from tree_sitter_language_pack import get_parser

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def javascript_parser() -> Parser:
    """Return a tree-sitter parser for JavaScript (with JSX)."""
    return get_parser("javascript")


@pytest.fixture
def legacy_component() -> str:
    """A page component using the legacy image API and a legacy query."""
    return """import React from "react"
import { graphql } from "gatsby"
import Img from "gatsby-image"

export default function Hero({ data }) {
  return (
    <main>
      <Img fluid={data.file.childImageSharp.fluid} alt="Hero" />
    </main>
  )
}

export const query = graphql`
  query HeroQuery {
    file(relativePath: { eq: "hero.jpg" }) {
      childImageSharp {
        fluid(maxWidth: 800) {
          ...GatsbyImageSharpFluid
        }
      }
    }
  }
`
"""


@pytest.fixture
def migrated_component() -> str:
    """The same component already written against the new image API."""
    return """import React from "react"
import { graphql } from "gatsby"
import { GatsbyImage } from "gatsby-plugin-image"

export default function Hero({ data }) {
  return <GatsbyImage image={data.file.childImageSharp.gatsbyImageData} alt="Hero" />
}

export const query = graphql`
  query HeroQuery {
    file(relativePath: { eq: "hero.jpg" }) {
      childImageSharp {
        gatsbyImageData(layout: FLUID)
      }
    }
  }
`
"""
