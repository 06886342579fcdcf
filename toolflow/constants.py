ASYNC_FLAG = "async"
JOB_RESULT_SUFFIX = "-job-result"
JOB_RESULT_TOOL = "job-result-retriever"
WORKFLOW_RUNNER_TOOL = "workflow-runner"
WORKFLOW_JOB_PREFIX = "workflow:"
