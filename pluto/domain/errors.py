class CourseNotFound(Exception):
    """Course is missing or owned by someone else."""


class VideoNotFound(Exception):
    """Video is missing or belongs to a course owned by someone else."""
