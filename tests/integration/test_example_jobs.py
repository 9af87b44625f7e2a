"""The bundled example jobs load, validate and generate compilable modules."""

import glob
import os

import pytest

from connforge.codegen.generator import generate_job
from connforge.config.loader import load_job
from connforge.validation import validate_job

EXAMPLES_DIR = os.path.join(os.path.dirname(__file__), "..", "..", "examples", "jobs")
EXAMPLE_JOBS = sorted(glob.glob(os.path.join(EXAMPLES_DIR, "*.yml")))


def test_examples_are_present():
    assert EXAMPLE_JOBS


@pytest.mark.parametrize("path", EXAMPLE_JOBS, ids=os.path.basename)
def test_example_job_generates(path):
    job = load_job(path, environ={})

    assert validate_job(job).is_valid
    compile(generate_job(job), path, "exec")
