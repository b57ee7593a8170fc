"""
launchpad.build - Artifact Builders
=====================================

    - LambdaPackager:  backend bundle (stage: build)
    - FrontendBuilder: static site (stage: frontend_build)
"""

from launchpad.build.frontend import FrontendBuilder
from launchpad.build.packaging import LambdaPackager

__all__ = ["LambdaPackager", "FrontendBuilder"]
