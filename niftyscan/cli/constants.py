"""Exit codes used by the niftyscan CLI."""

RUN_FAILURE_EXIT_CODE = 1
CONFIGURATION_EXIT_CODE = 2
RUN_IN_PROGRESS_EXIT_CODE = 3
