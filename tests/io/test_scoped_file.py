"""Tests for scoped ownership of file handles."""

import copy
import gc
import pickle

import pytest

from smartfile.io.errors import (
    ClosedFileError,
    EndOfFileError,
    HandleCapabilityError,
    OpenError,
    ReadError,
    WriteError,
)
from smartfile.io.file_stream import FileStream, InputFileStream, OutputFileStream
from smartfile.io.open_mode import OpenMode
from smartfile.io.scoped_file import (
    ScopedFile,
    ScopedReader,
    ScopedReadWriter,
    ScopedWriter,
    open_scoped_file,
    scoped_file,
)
from tests.io.fake_handles import (
    NeverOpensHandle,
    NotAFile,
    OpenableOnly,
    RaisingHandle,
    ReadOnlyHandle,
    RecordingHandle,
    WriteOnlyHandle,
)


class CountingPolicy:
    def __init__(self):
        self.calls = []

    def __call__(self, handle):
        self.calls.append(handle)
        if handle.is_open():
            handle.close()


class TestConstruction:
    """Wrapper class selection and capability rejection."""

    def test_read_write_handle_gets_read_writer(self):
        wrapper = ScopedFile(RecordingHandle())
        assert type(wrapper) is ScopedReadWriter
        assert isinstance(wrapper, ScopedReader)
        assert isinstance(wrapper, ScopedWriter)

    def test_read_only_handle_gets_reader(self):
        wrapper = scoped_file(ReadOnlyHandle())
        assert type(wrapper) is ScopedReader
        assert not hasattr(wrapper, "write_line")

    def test_write_only_handle_gets_writer(self):
        wrapper = scoped_file(WriteOnlyHandle())
        assert type(wrapper) is ScopedWriter
        assert not hasattr(wrapper, "read_line")

    def test_non_file_like_rejected(self):
        with pytest.raises(HandleCapabilityError):
            ScopedFile(NotAFile())

    def test_openable_without_io_rejected(self):
        with pytest.raises(HandleCapabilityError):
            scoped_file(OpenableOnly())

    def test_specific_class_checks_its_capability(self):
        with pytest.raises(HandleCapabilityError, match="not writable"):
            ScopedWriter(ReadOnlyHandle())
        with pytest.raises(HandleCapabilityError, match="not readable and writable"):
            ScopedReadWriter(WriteOnlyHandle())

    def test_handle_is_required(self):
        with pytest.raises(TypeError):
            ScopedFile()  # type: ignore[call-arg]

    def test_rejected_handle_is_not_closed(self):
        class ReadlessRecording(RecordingHandle):
            readline = None
            write = None

        handle = ReadlessRecording()
        with pytest.raises(HandleCapabilityError):
            ScopedFile(handle)
        gc.collect()
        assert handle.is_open()
        assert handle.close_calls == 0


class TestLineIO:
    def test_write_line_appends_newline(self):
        handle = RecordingHandle()
        wrapper = scoped_file(handle)
        wrapper.write_line("hello")
        wrapper.write_lines(["a", "b"])
        assert handle.written == ["hello\n", "a\n", "b\n"]

    def test_read_line_strips_terminator(self):
        handle = RecordingHandle(lines=["first\n", "\n", "last"])
        wrapper = scoped_file(handle)
        assert wrapper.read_line() == "first"
        assert wrapper.read_line() == ""
        assert wrapper.read_line() == "last"

    def test_read_at_end_raises_end_of_file(self):
        wrapper = scoped_file(RecordingHandle())
        with pytest.raises(EndOfFileError):
            wrapper.read_line()

    def test_end_of_file_is_a_read_error(self):
        wrapper = scoped_file(ReadOnlyHandle())
        with pytest.raises(ReadError):
            wrapper.read_line()

    def test_iteration_stops_at_end(self):
        wrapper = scoped_file(ReadOnlyHandle(lines=["a\n", "b\n"]))
        assert list(wrapper) == ["a", "b"]

    def test_unhealthy_handle_after_write(self):
        handle = RecordingHandle(healthy=False)
        wrapper = scoped_file(handle)
        with pytest.raises(WriteError):
            wrapper.write_line("x")

    def test_unhealthy_handle_after_read(self):
        handle = RecordingHandle(lines=["x\n"], healthy=False)
        wrapper = scoped_file(handle)
        with pytest.raises(ReadError) as exc_info:
            wrapper.read_line()
        assert not isinstance(exc_info.value, EndOfFileError)

    def test_handle_exceptions_become_io_errors(self):
        wrapper = scoped_file(RaisingHandle())
        with pytest.raises(WriteError) as write_info:
            wrapper.write_line("x")
        assert isinstance(write_info.value.__cause__, OSError)
        with pytest.raises(ReadError):
            wrapper.read_line()

    def test_failure_leaves_handle_open(self):
        handle = RecordingHandle(healthy=False)
        wrapper = scoped_file(handle)
        with pytest.raises(WriteError):
            wrapper.write_line("x")
        assert wrapper.is_open()
        assert handle.close_calls == 0

    def test_io_after_close_fails_fast(self):
        handle = RecordingHandle(lines=["x\n"])
        wrapper = scoped_file(handle)
        wrapper.close()
        with pytest.raises(ClosedFileError):
            wrapper.read_line()
        with pytest.raises(ClosedFileError):
            wrapper.write_line("y")
        assert handle.written == []
        assert handle.lines == ["x\n"]


class TestCloseAndLifetime:
    def test_close_is_idempotent(self):
        handle = RecordingHandle()
        wrapper = scoped_file(handle)
        wrapper.close()
        wrapper.close()
        assert not wrapper.is_open()
        assert handle.close_calls == 1

    def test_with_block_closes_handle(self):
        handle = RecordingHandle()
        with scoped_file(handle) as wrapper:
            assert wrapper.is_open()
        assert not handle.is_open()
        assert not wrapper.owns_handle

    def test_with_block_closes_on_error(self):
        handle = RecordingHandle(healthy=False)
        with pytest.raises(WriteError):
            with scoped_file(handle) as wrapper:
                wrapper.write_line("x")
        assert not handle.is_open()

    def test_release_immediately_after_construction(self):
        handle = RecordingHandle()
        wrapper = scoped_file(handle)
        del wrapper
        gc.collect()
        assert not handle.is_open()
        assert handle.close_calls == 1

    def test_release_policy_runs_exactly_once(self):
        policy = CountingPolicy()
        handle = RecordingHandle()
        with scoped_file(handle, release=policy) as wrapper:
            wrapper.close()
        del wrapper
        gc.collect()
        assert policy.calls == [handle]
        assert handle.close_calls == 1

    def test_release_after_partial_read(self):
        handle = RecordingHandle(lines=["a\n", "b\n"])
        with scoped_file(handle) as wrapper:
            wrapper.read_line()
        assert not handle.is_open()

    def test_failing_policy_does_not_raise(self):
        def broken(handle):
            raise RuntimeError("boom")

        with scoped_file(RecordingHandle(), release=broken):
            pass

    def test_close_errors_at_end_of_life_are_swallowed(self):
        handle = RaisingHandle()
        with scoped_file(handle):
            pass
        assert handle.close_calls == 1

    def test_is_open_never_raises(self):
        class BrokenIsOpen(RecordingHandle):
            def is_open(self):
                raise OSError("gone")

        wrapper = scoped_file(BrokenIsOpen())
        assert wrapper.is_open() is False


class TestOwnershipTransfer:
    def test_move_transfers_handle(self):
        policy = CountingPolicy()
        handle = RecordingHandle()
        source = scoped_file(handle, release=policy)

        target = source.move()
        assert type(target) is ScopedReadWriter
        assert target.is_open()
        assert not source.is_open()
        assert not source.owns_handle

        del source
        gc.collect()
        assert handle.is_open()
        assert handle.close_calls == 0

        del target
        gc.collect()
        assert policy.calls == [handle]
        assert handle.close_calls == 1

    def test_move_preserves_closed_state(self):
        handle = RecordingHandle()
        source = scoped_file(handle)
        source.close()
        target = source.move()
        assert not target.is_open()

    def test_moved_from_wrapper_is_inert(self):
        handle = RecordingHandle()
        source = scoped_file(handle)
        target = source.move()

        source.close()
        assert handle.is_open()
        assert handle.close_calls == 0
        with pytest.raises(ClosedFileError):
            source.write_line("x")
        with pytest.raises(ClosedFileError):
            source.move()
        assert target.is_open()

    def test_move_from_releases_current_handle(self):
        first = RecordingHandle()
        second = RecordingHandle()
        dest = scoped_file(first)
        src = scoped_file(second)

        dest.move_from(src)
        assert not first.is_open()
        assert second.is_open()
        assert dest.is_open()
        assert not src.owns_handle

        with dest:
            pass
        assert not second.is_open()

    def test_move_from_self_is_noop(self):
        handle = RecordingHandle()
        wrapper = scoped_file(handle)
        wrapper.move_from(wrapper)
        assert wrapper.is_open()
        assert handle.close_calls == 0

    def test_move_from_incompatible_wrapper(self):
        reader = scoped_file(ReadOnlyHandle())
        writer = scoped_file(WriteOnlyHandle())
        with pytest.raises(TypeError):
            reader.move_from(writer)

    def test_copy_is_disallowed(self):
        wrapper = scoped_file(RecordingHandle())
        with pytest.raises(TypeError, match="cannot be copied"):
            copy.copy(wrapper)
        with pytest.raises(TypeError, match="cannot be copied"):
            copy.deepcopy(wrapper)
        with pytest.raises(TypeError):
            pickle.dumps(wrapper)


class TestOpenScopedFile:
    def test_round_trip(self, tmp_path):
        path = tmp_path / "hello.txt"
        with open_scoped_file(path, OpenMode.WRITE) as f:
            f.write_line("hello")
            f.close()

        with open_scoped_file(path, OpenMode.READ) as f:
            assert f.read_line() == "hello"
            with pytest.raises(EndOfFileError):
                f.read_line()

    def test_default_mode_appends(self, tmp_path):
        path = tmp_path / "log.txt"
        with open_scoped_file(path) as f:
            f.write_line("one")
        with open_scoped_file(path) as f:
            f.write_line("two")
        assert path.read_text() == "one\ntwo\n"

    def test_default_mode_reads_from_start(self, tmp_path):
        path = tmp_path / "log.txt"
        path.write_text("existing\n")
        with open_scoped_file(path) as f:
            assert f.read_line() == "existing"

    def test_default_mode_from_configuration(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SMARTFILE_DEFAULT_MODE", "write")
        path = tmp_path / "data.txt"
        path.write_text("old\n")
        with open_scoped_file(path) as f:
            f.write_line("new")
        assert path.read_text() == "new\n"

    def test_mode_as_text(self, tmp_path):
        path = tmp_path / "data.txt"
        with open_scoped_file(path, "write|truncate") as f:
            f.write_line("x")
        assert path.read_text() == "x\n"

    def test_missing_file_raises_open_error(self, tmp_path):
        path = tmp_path / "missing" / "data.txt"
        with pytest.raises(OpenError) as exc_info:
            open_scoped_file(path, OpenMode.READ)
        assert exc_info.value.path == path
        assert str(path) in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    @pytest.mark.parametrize("mode", [OpenMode.TRUNCATE, OpenMode(0), OpenMode.READ | OpenMode.TRUNCATE])
    def test_unusable_mode_raises_open_error(self, tmp_path, mode):
        path = tmp_path / "data.txt"
        with pytest.raises(OpenError) as exc_info:
            open_scoped_file(path, mode)
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert not path.exists()

    def test_unknown_encoding_raises_open_error(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SMARTFILE_ENCODING", "no-such-codec")
        path = tmp_path / "data.txt"
        with pytest.raises(OpenError) as exc_info:
            open_scoped_file(path, OpenMode.WRITE)
        assert isinstance(exc_info.value.__cause__, LookupError)
        assert not path.exists()

    def test_handle_that_stays_closed_raises_open_error(self):
        with pytest.raises(OpenError, match="Failed to open file: nowhere"):
            open_scoped_file("nowhere", handle_type=NeverOpensHandle)

    def test_input_stream_has_no_write_line(self, tmp_path):
        path = tmp_path / "in.txt"
        path.write_text("a\n")
        with open_scoped_file(path, OpenMode.READ, handle_type=InputFileStream) as f:
            assert type(f) is ScopedReader
            assert not hasattr(f, "write_line")
            assert f.read_line() == "a"

    def test_output_stream_has_no_read_line(self, tmp_path):
        path = tmp_path / "out.txt"
        with open_scoped_file(path, OpenMode.WRITE, handle_type=OutputFileStream) as f:
            assert type(f) is ScopedWriter
            assert not hasattr(f, "read_line")
            f.write_line("b")
        assert path.read_text() == "b\n"

    def test_non_file_like_type_rejected_before_opening(self, tmp_path):
        path = tmp_path / "never.txt"
        with pytest.raises(HandleCapabilityError):
            open_scoped_file(path, OpenMode.WRITE, handle_type=NotAFile)
        assert not path.exists()

    def test_write_to_read_only_file_stream(self, tmp_path):
        path = tmp_path / "data.txt"
        path.write_text("x\n")
        with open_scoped_file(path, OpenMode.READ, handle_type=FileStream) as f:
            with pytest.raises(WriteError):
                f.write_line("y")
            assert f.is_open()
        assert path.read_text() == "x\n"
