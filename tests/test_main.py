import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch

from tests.fakes import FakeHost, FakeSession, FakeStore, alias_exe, place_alias
from winget_bootstrap import main as main_mod
from winget_bootstrap.config import BootstrapConfig
from winget_bootstrap.errors import PreconditionError, RuntimeInstallError


def _cfg(root: Path) -> BootstrapConfig:
    return BootstrapConfig(
        raw={
            "offline_dir": str(root / "offline"),
            "packages_file": str(root / "packages.txt"),
            "arch": "x64",
            "runtime": {
                "system_pattern": str(root / "WindowsApps" / "Microsoft.DesktopAppInstaller_*_{arch}__8wekyb3d8bbwe" / "winget.exe"),
            },
        }
    )


class TestMainPreconditions(unittest.TestCase):
    def test_not_elevated_exits_1_without_side_effects(self):
        with tempfile.TemporaryDirectory() as td:
            log_path = Path(td) / "bootstrap.log"
            report_path = Path(td) / "report.json"
            with patch.object(main_mod, "WindowsHost", return_value=FakeHost(elevated=False)), patch.object(
                main_mod, "make_session"
            ) as make_session, patch.object(main_mod, "AppxPackageStore") as store_cls, patch.object(
                main_mod, "configure_logging"
            ) as configure_logging, patch.object(main_mod, "run") as run:
                rc = main_mod.main(["--log", str(log_path), "--report", str(report_path)])

            self.assertEqual(rc, 1)
            configure_logging.assert_called_once_with(log_path=None, quiet=False)
            make_session.assert_not_called()
            store_cls.assert_not_called()
            run.assert_not_called()
            self.assertEqual(list(Path(td).iterdir()), [])

    def test_run_refuses_when_not_elevated(self):
        session = FakeSession()
        store = FakeStore()
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaises(PreconditionError):
                main_mod.run(cfg=_cfg(Path(td)), host=FakeHost(elevated=False), store=store, session=session)
        self.assertEqual(session.requests, [])
        self.assertEqual(store.queries, [])


class TestMainExitCodes(unittest.TestCase):
    def _main(self, argv, run_side_effect=None):
        with patch.object(main_mod, "WindowsHost", return_value=FakeHost()), patch.object(
            main_mod, "configure_logging"
        ), patch.object(main_mod, "run", side_effect=run_side_effect) as run:
            return main_mod.main(argv), run

    def test_success(self):
        rc, run = self._main(["--use-offline", "--offline-dir", "D:/staged", "--packages-file", "D:/pkgs.txt"])
        self.assertEqual(rc, 0)
        kwargs = run.call_args.kwargs
        self.assertTrue(kwargs["use_offline"])
        self.assertEqual(kwargs["cfg"].offline_dir, Path("D:/staged"))
        self.assertEqual(kwargs["cfg"].packages_file, Path("D:/pkgs.txt"))

    def test_fatal_error_exits_nonzero(self):
        rc, _ = self._main([], run_side_effect=RuntimeInstallError("both endpoints failed"))
        self.assertEqual(rc, 2)

    def test_malformed_config_exits_2(self):
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "bootstrap.yaml"
            p.write_text("runtime: [unclosed\n", encoding="utf-8")
            rc, run = self._main(["--config", str(p)])
        self.assertEqual(rc, 2)
        run.assert_not_called()

    def test_missing_yaml_library_exits_2(self):
        with patch.object(main_mod, "load_config", side_effect=RuntimeError("PyYAML is required")):
            rc, run = self._main(["--config", "bootstrap.yaml"])
        self.assertEqual(rc, 2)
        run.assert_not_called()


class TestRunPipeline(unittest.TestCase):
    def setUp(self):
        self._td = tempfile.TemporaryDirectory()
        self.root = Path(self._td.name)
        self._env = patch.dict(os.environ, {"LOCALAPPDATA": str(self.root / "LocalAppData")})
        self._env.start()

    def tearDown(self):
        self._env.stop()
        self._td.cleanup()

    def _install_creates_runtime(self, path: Path) -> None:
        if path.suffix == ".msixbundle":
            place_alias(self.root)

    def test_offline_run_makes_no_network_requests(self):
        offline = self.root / "offline"
        offline.mkdir()
        for name in (
            "Microsoft.VCLibs.x64.14.00.Desktop.appx",
            "Microsoft.UI.Xaml.2.8.x64.appx",
            "Microsoft.DesktopAppInstaller_8wekyb3d8bbwe.msixbundle",
        ):
            (offline / name).write_bytes(name.encode())
        (self.root / "packages.txt").write_text("Git.Git\n", encoding="utf-8")

        store = FakeStore(on_install=self._install_creates_runtime)
        session = FakeSession()
        report = self.root / "report.json"
        with redirect_stdout(io.StringIO()) as out:
            state = main_mod.run(
                cfg=_cfg(self.root),
                use_offline=True,
                host=FakeHost(),
                store=store,
                session=session,
                report_path=str(report),
            )

        self.assertEqual(session.requests, [])
        self.assertEqual(
            [r.path.name for r in store.installs],
            [
                "Microsoft.VCLibs.x64.14.00.Desktop.appx",
                "Microsoft.UI.Xaml.2.8.x64.appx",
                "Microsoft.DesktopAppInstaller_8wekyb3d8bbwe.msixbundle",
            ],
        )
        self.assertEqual(out.getvalue(), "v1.9.25200\n")
        self.assertEqual(state["execution"]["runtime"]["install"], "offline_install")
        self.assertEqual(state["execution"]["packages"], [{"id": "Git.Git", "ok": True, "returncode": 0}])

        written = json.loads(report.read_text(encoding="utf-8"))
        self.assertEqual(
            written["execution"]["completed_steps"],
            [
                "10_preconditions",
                "20_install_dependencies",
                "30_install_runtime",
                "40_verify_runtime",
                "50_install_packages",
            ],
        )

    def test_second_run_is_a_no_op(self):
        place_alias(self.root)
        store = FakeStore(installed=["Microsoft.VCLibs.140.00.UWPDesktop", "Microsoft.UI.Xaml.2.8"])
        session = FakeSession()
        with redirect_stdout(io.StringIO()):
            state = main_mod.run(cfg=_cfg(self.root), host=FakeHost(), store=store, session=session)
        self.assertEqual(session.requests, [])
        self.assertEqual(store.installs, [])
        self.assertEqual(state["execution"]["runtime"]["install"], "not_needed")

    def test_failed_run_is_still_reported(self):
        store = FakeStore(installed=["Microsoft.VCLibs.140.00.UWPDesktop", "Microsoft.UI.Xaml.2.8"])
        cfg = _cfg(self.root)
        rt = cfg.runtime("x64")
        session = FakeSession(failing=[rt.primary_url, rt.fallback_url])
        report = self.root / "report.json"
        with self.assertRaises(RuntimeInstallError), self.assertLogs("winget_bootstrap", level="ERROR"):
            main_mod.run(cfg=cfg, host=FakeHost(), store=store, session=session, report_path=str(report))
        self.assertFalse(alias_exe(self.root).exists())
        written = json.loads(report.read_text(encoding="utf-8"))
        self.assertEqual(written["execution"]["errors"][0]["step"], "30_install_runtime")


if __name__ == "__main__":
    unittest.main()
