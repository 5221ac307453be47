"""
Tests for service/media_info.py
"""

from unittest.mock import MagicMock, patch

from django.test import SimpleTestCase

from transfer.service.media_info import (
    MediaStreamInfo,
    ProbeError,
    compute_frame_rate,
    parse_probe_output,
    probe_video_stream,
)


class ComputeFrameRateTest(SimpleTestCase):
    """Tests for rational frame rate handling"""

    def test_ntsc(self):
        self.assertAlmostEqual(compute_frame_rate(30000, 1001), 29.97, places=2)

    def test_whole(self):
        self.assertEqual(compute_frame_rate(25, 1), 25.0)

    def test_zero_over_zero_uses_default(self):
        self.assertEqual(compute_frame_rate(0, 0), 25.0)

    def test_zero_denominator_uses_default(self):
        self.assertEqual(compute_frame_rate(30, 0), 25.0)

    def test_missing_uses_default(self):
        self.assertEqual(compute_frame_rate(None, None), 25.0)
        self.assertEqual(compute_frame_rate(30, None), 25.0)

    def test_custom_default(self):
        self.assertEqual(compute_frame_rate(0, 0, default=24), 24.0)


class ParseProbeOutputTest(SimpleTestCase):
    """Tests for positional ffprobe output parsing"""

    def test_csv_line(self):
        info = parse_probe_output('1920,1080,30000/1001\n')
        self.assertEqual(info, MediaStreamInfo(1920, 1080, 30000, 1001))

    def test_line_per_field(self):
        info = parse_probe_output('1280\n720\n25/1\n')
        self.assertEqual(info, MediaStreamInfo(1280, 720, 25, 1))

    def test_rate_without_denominator(self):
        info = parse_probe_output('640,360,24')
        self.assertEqual((info.frame_rate_num, info.frame_rate_den), (24, 1))

    def test_zero_rate(self):
        info = parse_probe_output('640,360,0/0')
        self.assertEqual((info.frame_rate_num, info.frame_rate_den), (0, 0))

    def test_missing_rate(self):
        info = parse_probe_output('640,360')
        self.assertEqual(info.width, 640)
        self.assertIsNone(info.frame_rate_num)
        self.assertIsNone(info.frame_rate_den)

    def test_unparsable_fields(self):
        info = parse_probe_output('N/A,N/A,N/A')
        self.assertIsNone(info.width)
        self.assertIsNone(info.height)

    def test_empty_output_raises(self):
        with self.assertRaises(ProbeError):
            parse_probe_output('  \n')


class ProbeVideoStreamTest(SimpleTestCase):
    """Tests for running ffprobe"""

    @patch('transfer.service.media_info.subprocess.run')
    def test_probe_success(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout='3840,2160,25/1\n')

        info = probe_video_stream('/tmp/in.mp4')

        self.assertEqual(info, MediaStreamInfo(3840, 2160, 25, 1))
        cmd = mock_run.call_args[0][0]
        self.assertEqual(cmd[0], 'ffprobe')
        self.assertIn('v:0', cmd)
        self.assertIn('stream=width,height,r_frame_rate', cmd)
        self.assertEqual(cmd[-1], '/tmp/in.mp4')

    @patch('transfer.service.media_info.subprocess.run')
    def test_probe_failure(self, mock_run):
        mock_run.return_value = MagicMock(returncode=1, stdout='', stderr='Invalid data')
        with self.assertRaises(ProbeError):
            probe_video_stream('/tmp/in.mp4')

    @patch('transfer.service.media_info.subprocess.run')
    def test_probe_missing_binary(self, mock_run):
        mock_run.side_effect = FileNotFoundError('ffprobe')
        with self.assertRaises(ProbeError):
            probe_video_stream('/tmp/in.mp4')

    @patch('transfer.service.media_info.subprocess.run')
    def test_audio_only_file(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout='')
        with self.assertRaises(ProbeError):
            probe_video_stream('/tmp/audio.mp4')
