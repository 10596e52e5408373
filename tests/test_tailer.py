# Copyright Thales 2025
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import pytest

from zupport.features.logs.tailer import FileTail


def _append(path, text):
    with open(path, "a", encoding="utf-8") as f:
        f.write(text)


class TestFileTail:
    @pytest.mark.asyncio
    async def test_starts_at_end_of_file(self, tmp_path):
        log = tmp_path / "app.log"
        log.write_text("old line\n", encoding="utf-8")
        tail = FileTail(log)
        await tail.open()
        try:
            assert await tail.read_lines() == []
            _append(log, "new line\n")
            assert await tail.read_lines() == ["new line"]
        finally:
            await tail.close()
        assert not tail.is_open

    @pytest.mark.asyncio
    async def test_partial_line_is_held_until_complete(self, tmp_path):
        log = tmp_path / "app.log"
        log.write_text("", encoding="utf-8")
        tail = FileTail(log)
        await tail.open()
        try:
            _append(log, "first\nsec")
            assert await tail.read_lines() == ["first"]
            assert tail.partial == b"sec"
            _append(log, "ond\nthird\n")
            assert await tail.read_lines() == ["second", "third"]
            assert tail.partial == b""
        finally:
            await tail.close()

    @pytest.mark.asyncio
    async def test_truncation_rewinds_to_start(self, tmp_path):
        log = tmp_path / "app.log"
        log.write_text("a long line that will disappear\n", encoding="utf-8")
        tail = FileTail(log)
        await tail.open()
        try:
            with open(log, "w", encoding="utf-8") as f:
                f.write("fresh\n")
            assert await tail.read_lines() == ["fresh"]
        finally:
            await tail.close()

    @pytest.mark.asyncio
    async def test_multibyte_character_split_across_polls(self, tmp_path):
        log = tmp_path / "app.log"
        log.write_text("", encoding="utf-8")
        encoded = "café\n".encode("utf-8")
        tail = FileTail(log)
        await tail.open()
        try:
            with open(log, "ab") as f:
                f.write(encoded[:-2])
            assert await tail.read_lines() == []
            with open(log, "ab") as f:
                f.write(encoded[-2:])
            assert await tail.read_lines() == ["café"]
        finally:
            await tail.close()

    @pytest.mark.asyncio
    async def test_only_line_feeds_split_lines(self, tmp_path):
        log = tmp_path / "app.log"
        log.write_text("", encoding="utf-8")
        tail = FileTail(log)
        await tail.open()
        try:
            with open(log, "ab") as f:
                f.write("page\x0cbreak\r\nnext\u2028same\n".encode("utf-8"))
            assert await tail.read_lines() == ["page\x0cbreak", "next\u2028same"]
        finally:
            await tail.close()

    @pytest.mark.asyncio
    async def test_rotation_emits_remaining_old_lines_first(self, tmp_path):
        log = tmp_path / "app.log"
        log.write_text("", encoding="utf-8")
        tail = FileTail(log)
        await tail.open()
        try:
            _append(log, "last line before rotate\n")
            log.rename(tmp_path / "app.log.1")
            log.write_text("first line after rotate\n", encoding="utf-8")
            assert await tail.read_lines() == ["last line before rotate", "first line after rotate"]
            _append(log, "more\n")
            assert await tail.read_lines() == ["more"]
        finally:
            await tail.close()

    @pytest.mark.asyncio
    async def test_open_missing_file_raises(self, tmp_path):
        tail = FileTail(tmp_path / "absent.log")
        with pytest.raises(FileNotFoundError):
            await tail.open()
        assert not tail.is_open

    @pytest.mark.asyncio
    async def test_read_before_open_is_an_error(self, tmp_path):
        with pytest.raises(RuntimeError):
            await FileTail(tmp_path / "app.log").read_lines()
