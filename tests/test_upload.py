"""Tests for upload attempts and the retry loop."""

import logging
import os

import pytest

from one_picgo.core.models import UploadOutcome
from one_picgo.core.upload import (
    UploadAttemptExecutor,
    remote_url_from,
    staging_name,
    with_retry,
)


class RecordingUploader:
    """Uploader double that records what it was given."""

    def __init__(self, result=None, error=None):
        self.result = result if result is not None else [{"imgUrl": "https://cdn/img.png"}]
        self.error = error
        self.calls = []
        self.existed = []

    def upload(self, paths):
        self.calls.append(list(paths))
        self.existed.append(all(os.path.exists(p) for p in paths))
        if self.error:
            raise self.error
        return self.result


class TestStagingName:
    """Tests for staging_name."""

    def test_format(self):
        name = staging_name("My Notes", "/docs/Photo.PNG", now=1700000000.5, token="abcd1234")

        assert name == "My Notes_Photo_1700000000500_abcd1234.PNG"

    def test_non_ascii_names_kept(self):
        name = staging_name("笔记", "/docs/图片 1.png", now=1.0, token="ff")

        assert name == "笔记_图片 1_1000_ff.png"

    def test_unsafe_characters_replaced(self):
        name = staging_name('a:b?"c', "/docs/x*y|z.jpg", now=1.0, token="ff")

        assert name == "a_b__c_x_y_z_1000_ff.jpg"

    def test_unique_per_call(self):
        names = {staging_name("doc", "/docs/a.png") for _ in range(20)}

        assert len(names) == 20


class TestRemoteUrlFrom:
    """Tests for uploader response interpretation."""

    def test_valid(self):
        assert remote_url_from([{"imgUrl": "https://cdn/a.png"}]) == "https://cdn/a.png"

    @pytest.mark.parametrize("result", [
        None,
        [],
        [{}],
        [{"imgUrl": ""}],
        [{"imgUrl": None}],
        ["https://cdn/a.png"],
        {"imgUrl": "https://cdn/a.png"},
    ])
    def test_malformed(self, result):
        assert remote_url_from(result) is None


class TestUploadAttemptExecutor:
    """Tests for UploadAttemptExecutor class."""

    @pytest.fixture
    def image(self, tmp_path):
        path = tmp_path / "docs" / "img1.png"
        path.parent.mkdir()
        path.write_bytes(b"\x89PNG fake")
        return path

    @pytest.fixture
    def staging_dir(self, tmp_path):
        path = tmp_path / "staging"
        path.mkdir()
        return path

    def test_success(self, image, staging_dir):
        uploader = RecordingUploader()
        executor = UploadAttemptExecutor(uploader, staging_dir=str(staging_dir))

        outcome = executor.attempt(str(image), "note")

        assert outcome.ok
        assert outcome.remote_url == "https://cdn/img.png"

    def test_uploads_staging_copy(self, image, staging_dir):
        uploader = RecordingUploader()
        executor = UploadAttemptExecutor(uploader, staging_dir=str(staging_dir))

        executor.attempt(str(image), "note")

        uploaded = uploader.calls[0][0]
        assert os.path.dirname(uploaded) == str(staging_dir)
        assert os.path.basename(uploaded).startswith("note_img1_")
        assert uploaded.endswith(".png")
        assert uploader.existed == [True]

    def test_staging_removed_after_success(self, image, staging_dir):
        executor = UploadAttemptExecutor(RecordingUploader(), staging_dir=str(staging_dir))

        executor.attempt(str(image), "note")

        assert list(staging_dir.iterdir()) == []
        assert image.exists()

    def test_staging_removed_after_failure(self, image, staging_dir):
        executor = UploadAttemptExecutor(RecordingUploader(result=[]), staging_dir=str(staging_dir))

        outcome = executor.attempt(str(image), "note")

        assert not outcome.ok
        assert list(staging_dir.iterdir()) == []

    def test_staging_removed_after_uploader_error(self, image, staging_dir):
        uploader = RecordingUploader(error=RuntimeError("boom"))
        executor = UploadAttemptExecutor(uploader, staging_dir=str(staging_dir))

        outcome = executor.attempt(str(image), "note")

        assert not outcome.ok
        assert "boom" in outcome.reason
        assert list(staging_dir.iterdir()) == []

    def test_staging_removed_on_interrupt(self, image, staging_dir):
        uploader = RecordingUploader(error=KeyboardInterrupt())
        executor = UploadAttemptExecutor(uploader, staging_dir=str(staging_dir))

        with pytest.raises(KeyboardInterrupt):
            executor.attempt(str(image), "note")

        assert list(staging_dir.iterdir()) == []

    def test_missing_source_fails_without_upload(self, tmp_path, staging_dir):
        uploader = RecordingUploader()
        executor = UploadAttemptExecutor(uploader, staging_dir=str(staging_dir))

        outcome = executor.attempt(str(tmp_path / "missing.png"), "note")

        assert not outcome.ok
        assert "not found" in outcome.reason
        assert uploader.calls == []

    def test_staging_copy_failure(self, image, tmp_path):
        uploader = RecordingUploader()
        executor = UploadAttemptExecutor(uploader, staging_dir=str(tmp_path / "no-such-dir"))

        outcome = executor.attempt(str(image), "note")

        assert not outcome.ok
        assert "Could not stage" in outcome.reason
        assert uploader.calls == []

    def test_malformed_response(self, image, staging_dir):
        executor = UploadAttemptExecutor(
            RecordingUploader(result=[{"url": "x"}]), staging_dir=str(staging_dir)
        )

        outcome = executor.attempt(str(image), "note")

        assert not outcome.ok
        assert "Unexpected uploader response" in outcome.reason

    def test_without_staging(self, image, staging_dir):
        uploader = RecordingUploader()
        executor = UploadAttemptExecutor(uploader, staging_dir=str(staging_dir), use_staging=False)

        outcome = executor.attempt(str(image), "note")

        assert outcome.ok
        assert uploader.calls == [[str(image)]]
        assert image.exists()


class ScriptedAttempt:
    """Attempt callable failing a fixed number of times before succeeding."""

    def __init__(self, failures, succeed=True):
        self.failures = failures
        self.succeed = succeed
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures or not self.succeed:
            return UploadOutcome.failure(f"failure {self.calls}")
        return UploadOutcome.success("https://cdn/ok.png")


class TestWithRetry:
    """Tests for with_retry."""

    def test_first_success_stops(self):
        attempt = ScriptedAttempt(failures=0)
        sleeps = []

        outcome = with_retry(attempt, max_retries=3, delay_ms=1000, sleep=sleeps.append)

        assert outcome.ok
        assert outcome.attempts == 1
        assert attempt.calls == 1
        assert sleeps == []

    @pytest.mark.parametrize("failures", [1, 2])
    def test_succeeds_after_failures(self, failures):
        attempt = ScriptedAttempt(failures=failures)
        sleeps = []

        outcome = with_retry(attempt, max_retries=3, delay_ms=500, sleep=sleeps.append)

        assert outcome.ok
        assert outcome.remote_url == "https://cdn/ok.png"
        assert attempt.calls == failures + 1
        assert outcome.attempts == failures + 1
        assert sleeps == [0.5] * failures

    def test_always_failing(self):
        attempt = ScriptedAttempt(failures=0, succeed=False)
        sleeps = []

        outcome = with_retry(attempt, max_retries=3, delay_ms=2000, sleep=sleeps.append)

        assert not outcome.ok
        assert attempt.calls == 3
        assert outcome.attempts == 3
        assert outcome.reason == "failure 3"
        # No delay after the final failure
        assert sleeps == [2.0, 2.0]

    def test_single_attempt(self):
        attempt = ScriptedAttempt(failures=0, succeed=False)
        sleeps = []

        outcome = with_retry(attempt, max_retries=1, delay_ms=1000, sleep=sleeps.append)

        assert not outcome.ok
        assert attempt.calls == 1
        assert sleeps == []

    def test_zero_retries_still_attempts_once(self):
        attempt = ScriptedAttempt(failures=0)

        outcome = with_retry(attempt, max_retries=0, delay_ms=0, sleep=lambda s: None)

        assert outcome.ok
        assert attempt.calls == 1

    def test_retried_attempts_logged(self, caplog):
        attempt = ScriptedAttempt(failures=0, succeed=False)

        with caplog.at_level(logging.WARNING, logger="one_picgo.core.upload"):
            with_retry(attempt, max_retries=3, delay_ms=0, sleep=lambda s: None)

        messages = [r.getMessage() for r in caplog.records]
        assert messages == [
            "Upload attempt 1/3 failed: failure 1",
            "Upload attempt 2/3 failed: failure 2",
        ]

    def test_attempt_exception_propagates(self):
        def attempt():
            raise KeyboardInterrupt()

        with pytest.raises(KeyboardInterrupt):
            with_retry(attempt, max_retries=3, delay_ms=0, sleep=lambda s: None)
