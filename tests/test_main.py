"""Tests for the console entry point."""

from unittest.mock import patch

import main


def test_main_runs_shared_server_over_stdio():
    with patch.object(main.mcp, "run") as mock_run:
        main.main()
    mock_run.assert_called_once_with()

