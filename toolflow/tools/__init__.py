from .job_result import JobResultInput, make_job_result_tool, register_job_result_tools
from .workflow_runner import WorkflowRunnerHandler, WorkflowRunnerInput

__all__ = [
    "JobResultInput",
    "WorkflowRunnerHandler",
    "WorkflowRunnerInput",
    "make_job_result_tool",
    "register_job_result_tools",
]
