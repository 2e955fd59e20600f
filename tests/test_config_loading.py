"""Test cases for global configuration, project files and collaborator wiring."""

import pytest
import yaml

from buildtool.build.collaborators import import_object, load_collaborators
from buildtool.config.env_context import load_env_context
from buildtool.config.global_config_loader import GlobalConfig, load_global_config
from buildtool.config.project_loader import ProjectLoader
from buildtool.core.enums import ComponentKind
from buildtool.core.errors import CollaboratorImportError, ConfigurationError
from buildtool.core.models import BuildOptsCLI, NamedComponent


@pytest.fixture
def project_file(tmp_path):
    path = tmp_path / "project" / "project.yaml"
    path.parent.mkdir()
    path.write_text(yaml.safe_dump({
        'snapshot': 'lts-21.25',
        'packages': [
            {'name': 'app', 'version': '0.1.0', 'executables': ['app-exe'],
             'files': ['src/Main.hs']},
            {'name': 'lib-core', 'version': '1.0', 'path': 'libs/core',
             'components': ['lib'], 'unbuildable': ['bench:speed']},
        ],
        'dependencies': [
            {'name': 'text', 'version': '2.0.2'},
            {'name': 'patched', 'version': '0.3', 'path': 'vendor/patched'},
        ],
    }))
    return path


class TestGlobalConfig:

    def test_defaults_when_missing(self, tmp_path):
        config = GlobalConfig.from_yaml(str(tmp_path / "nope.yaml"))

        assert config.allow_locals
        assert not config.build.split_objs

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "global_config.yaml"
        path.write_text(yaml.safe_dump({
            'allow_newer': True,
            'build': {'split_objs': True, 'haddock': True},
            'toolchain': {'cabal_version': '1.24.2.0'},
            'extra_package_dbs': ['/opt/db'],
        }))

        config = load_global_config(str(path))

        assert config.allow_newer
        assert config.build.split_objs
        assert config.build.should_haddock_deps()
        assert config.toolchain.cabal_version == '1.24.2.0'
        assert config.extra_package_dbs == ['/opt/db']
        assert config.source_path == str(path)

    def test_unquoted_cabal_version_rejected(self, tmp_path):
        path = tmp_path / "global_config.yaml"
        path.write_text("toolchain:\n  cabal_version: 3.10\n")

        with pytest.raises(ConfigurationError, match="cabal_version"):
            GlobalConfig.from_yaml(str(path))

    def test_unknown_keys_rejected(self, tmp_path):
        path = tmp_path / "global_config.yaml"
        path.write_text(yaml.safe_dump({'build': {'turbo': True}}))

        with pytest.raises(ConfigurationError):
            GlobalConfig.from_yaml(str(path))


class TestProjectLoader:

    def test_locals(self, project_file):
        project = ProjectLoader.load_from_yaml(str(project_file))

        app, core = project.locals
        assert app.name == 'app'
        assert app.exe_components() == {'app-exe'}
        assert NamedComponent(ComponentKind.LIBRARY) in app.components
        assert app.cabal_file == project.root / 'app' / 'app.cabal'
        assert project.root / 'app' / 'src' / 'Main.hs' in app.files
        assert core.directory == project.root / 'libs' / 'core'
        assert core.unbuildable == {NamedComponent(ComponentKind.BENCHMARK, 'speed')}

    def test_dependencies(self, project_file):
        project = ProjectLoader.load_from_yaml(str(project_file))

        assert project.dependencies['text'].location == 'index:text-2.0.2'
        assert not project.dependencies['text'].from_local_dir
        assert project.dependencies['patched'].from_local_dir
        assert [lp.name for lp in project.dependency_locals] == ['patched']
        assert not project.dependency_locals[0].wanted

    def test_missing_snapshot(self, tmp_path):
        path = tmp_path / "project.yaml"
        path.write_text(yaml.safe_dump({'packages': []}))

        with pytest.raises(ConfigurationError, match="snapshot"):
            ProjectLoader.load_from_yaml(str(path))

    def test_duplicate_packages(self, tmp_path):
        path = tmp_path / "project.yaml"
        path.write_text(yaml.safe_dump({
            'snapshot': 's',
            'packages': [{'name': 'a', 'version': '1'}, {'name': 'a', 'version': '2'}],
        }))

        with pytest.raises(ConfigurationError, match="Duplicate"):
            ProjectLoader.load_from_yaml(str(path))

    def test_quoted_version_keeps_trailing_zero(self, tmp_path):
        path = tmp_path / "project.yaml"
        path.write_text("snapshot: s\npackages:\n  - name: mypkg\n    version: '0.10'\n")

        project = ProjectLoader.load_from_yaml(str(path))

        assert project.locals[0].package.version == (0, 10)

    @pytest.mark.parametrize("section", ["packages", "dependencies"])
    def test_unquoted_float_version_rejected(self, tmp_path, section):
        # 0.10 would otherwise load as the float 0.1
        path = tmp_path / "project.yaml"
        path.write_text(f"snapshot: s\n{section}:\n  - name: mypkg\n    version: 0.10\n")

        with pytest.raises(ConfigurationError, match="quote"):
            ProjectLoader.load_from_yaml(str(path))

    def test_integer_version_accepted(self, tmp_path):
        path = tmp_path / "project.yaml"
        path.write_text("snapshot: s\npackages:\n  - name: mypkg\n    version: 2\n")

        assert ProjectLoader.load_from_yaml(str(path)).locals[0].package.version == (2,)

    @pytest.mark.parametrize("section", ["packages", "dependencies"])
    def test_entry_must_be_mapping(self, tmp_path, section):
        path = tmp_path / "project.yaml"
        path.write_text(yaml.safe_dump({'snapshot': 's', section: ['foo']}))

        with pytest.raises(ConfigurationError, match="must be a mapping"):
            ProjectLoader.load_from_yaml(str(path))

    def test_env_context(self, project_file):
        ctx = load_env_context(
            GlobalConfig.default(), str(project_file),
            BuildOptsCLI(targets=('app',)), environ={'PATH': '/usr/bin'},
        )

        assert ctx.config_path == project_file.resolve()
        assert ctx.local_names == {'app', 'lib-core'}
        assert [lp.name for lp in ctx.all_locals] == ['app', 'lib-core', 'patched']
        assert ctx.source_map.targets == ('app',)
        assert ctx.search_path == ('/usr/bin',)
        install_map = ctx.source_map.to_install_map()
        assert install_map['app'][0].value == 'local'
        assert install_map['patched'][0].value == 'local'
        assert install_map['text'][0].value == 'snapshot'

    def test_default_targets_are_wanted_locals(self, project_file):
        ctx = load_env_context(GlobalConfig.default(), str(project_file), environ={})

        assert ctx.source_map.targets == ('app', 'lib-core')

    def test_config_overrides_stay_with_their_context(self, make_ctx):
        strict = make_ctx(allow_locals=False, global_hints={'base': '4.17.2.1'})
        default = make_ctx()

        assert not strict.config.allow_locals
        assert strict.config.global_hints == {'base': '4.17.2.1'}
        assert default.config.allow_locals
        assert default.config.global_hints is None
        assert strict.config is not default.config


class TestCollaboratorLoading:

    def test_import_object(self):
        assert import_object('fake_collaborators:create_prober').__name__ == 'create_prober'

    @pytest.mark.parametrize("import_string", ['no_colon', 'missing_module_xyz:thing',
                                               'fake_collaborators:missing'])
    def test_import_failures(self, import_string):
        with pytest.raises(CollaboratorImportError):
            import_object(import_string)

    def test_missing_required_collaborators(self):
        with pytest.raises(ConfigurationError, match="installed_prober"):
            load_collaborators(GlobalConfig.default())

    def test_load_collaborators(self):
        config = GlobalConfig.default()
        config.collaborators.installed_prober = 'fake_collaborators:create_prober'
        config.collaborators.plan_constructor = 'fake_collaborators:create_plan_constructor'
        config.collaborators.executor = 'fake_collaborators:create_executor'
        config.collaborators.package_loader = 'fake_collaborators:create_package_loader'

        collaborators = load_collaborators(config)

        assert type(collaborators.executor).__name__ == 'RecordingExecutor'
        assert collaborators.pre_fetcher is None
