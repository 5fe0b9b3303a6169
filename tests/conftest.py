"""
Shared fixtures for the formula updater tests.
"""

import copy
import logging

import pytest

from formula_updater.config import DEFAULT_CONFIG, UpdateInputs

logging.basicConfig(level=logging.DEBUG)

SAMPLE_FORMULA = """class Slidesk < Formula
  desc "Talk engine"
  homepage "https://slidesk.github.io/slidesk-doc/"
  url "https://github.com/slidesk/slidesk/releases/download/2.4.0/slidesk.tar.gz"
  version 2.4.0
  license "MIT"

  on_macos do
    on_arm do
      url "https://github.com/slidesk/slidesk/releases/download/2.4.0/slidesk-darwin-arm64.tar.gz"
      sha256 "1111aaaa" # darwin-arm64
    end
    on_intel do
      sha256 "2222bbbb" # darwin-x64
    end
  end

  def install
    bin.install "slidesk"
  end
end
"""


@pytest.fixture
def sample_formula():
    return SAMPLE_FORMULA


@pytest.fixture
def config():
    return copy.deepcopy(DEFAULT_CONFIG)


@pytest.fixture
def make_inputs():
    def _make(**overrides):
        values = {
            "file": "Formula/slidesk.rb",
            "owner": "yodamad",
            "repo": "homebrew-tools",
            "version": "2.5.0",
            "token": "ghp_secret123",
            "field": "sha256",
            "sha256": "cafef00d",
            "fields": "",
        }
        values.update(overrides)
        return UpdateInputs(**values)
    return _make
