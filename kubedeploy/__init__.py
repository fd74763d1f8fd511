"""kubedeploy: ordered kubectl deployment pipeline for an LMS/CMS platform."""

__version__ = "0.3.0"
