"""Project persistence."""
from .project import ChartType, VizProject, load_project, save_project

__all__ = ["ChartType", "VizProject", "load_project", "save_project"]
