"""
L0 Data — Built-in provisioning catalog.

Pure data, no logic.  These are the defaults a ``devsetup.yml``
may override key by key.

Package tables map one logical package to its name on each
supported package manager.  A manager left out of ``names`` means
the package does not exist there and the step is skipped.
"""

from __future__ import annotations


# ── OS packages (tools pipeline) ────────────────────────────────

ESSENTIAL_PACKAGES: list[dict] = [
    {"name": "git"},
    {"name": "curl"},
    {"name": "wget"},
    {
        "name": "build-tools",
        # dnf groups have no rpm record, so probe the compiler instead
        "command": "gcc",
        "names": {"apt": "build-essential", "dnf": "@development-tools", "pacman": "base-devel"},
    },
    {"name": "pkg-config"},
    {"name": "autoconf"},
    {"name": "bison"},
    {"name": "rust", "names": {"apt": "rustc", "dnf": "rust", "pacman": "rust"}},
    {"name": "cargo"},
    {"name": "clang"},
    {"name": "openssl-dev", "names": {"apt": "libssl-dev", "dnf": "openssl-devel", "pacman": "openssl"}},
    {"name": "readline-dev", "names": {"apt": "libreadline-dev", "dnf": "readline-devel", "pacman": "readline"}},
    {"name": "zlib-dev", "names": {"apt": "zlib1g-dev", "dnf": "zlib-devel", "pacman": "zlib"}},
    {"name": "yaml-dev", "names": {"apt": "libyaml-dev", "dnf": "libyaml-devel", "pacman": "libyaml"}},
    {"name": "ncurses-dev", "names": {"apt": "libncurses-dev", "dnf": "ncurses-devel", "pacman": "ncurses"}},
    {"name": "ffi-dev", "names": {"apt": "libffi-dev", "dnf": "libffi-devel", "pacman": "libffi"}},
    {"name": "gdbm-dev", "names": {"apt": "libgdbm-dev", "dnf": "gdbm-devel", "pacman": "gdbm"}},
    {"name": "jemalloc", "names": {"apt": "libjemalloc2", "dnf": "jemalloc", "pacman": "jemalloc"}},
    {"name": "vips", "names": {"apt": "libvips", "dnf": "vips", "pacman": "libvips"}},
    {"name": "imagemagick", "names": {"apt": "imagemagick", "dnf": "ImageMagick", "pacman": "imagemagick"}},
    {"name": "magickwand-dev", "names": {"apt": "libmagickwand-dev", "dnf": "ImageMagick-devel"}},
    {"name": "mupdf", "names": {"apt": ["mupdf", "mupdf-tools"], "dnf": "mupdf", "pacman": "mupdf"}},
    {"name": "redis-client", "names": {"apt": "redis-tools", "dnf": "redis", "pacman": "redis"}},
    {"name": "sqlite", "names": {"apt": ["sqlite3", "libsqlite3-0"], "dnf": ["sqlite", "sqlite-devel"], "pacman": "sqlite"}},
    {"name": "mysql-client-dev", "names": {"apt": "libmysqlclient-dev", "dnf": "mysql-devel", "pacman": "mariadb-libs"}},
    {"name": "unzip"},
]


# ── GitHub release binaries ─────────────────────────────────────

RELEASE_BINARIES: list[dict] = [
    {
        "repo": "jesseduffield/lazygit",
        "binary": "lazygit",
        "asset_template": "{binary}_{version}_{os_title}_{arch}.tar.gz",
    },
    {
        "repo": "jesseduffield/lazydocker",
        "binary": "lazydocker",
        "asset_template": "{binary}_{version}_{os_title}_{arch}.tar.gz",
    },
]

RELEASE_INSTALL_DIR = "/usr/local/bin"


# ── Version manager (mise) ──────────────────────────────────────

MISE_INSTALL_URL = "https://mise.run"
MISE_LOCAL_BIN = "~/.local/bin/mise"
MISE_ACTIVATE_LINE = 'eval "$(~/.local/bin/mise activate bash)"'
SHELL_RC_FILE = "~/.bashrc"

RUNTIMES: list[dict] = [
    {"tool": "node", "channel": "lts", "command": "node"},
    {"tool": "python", "channel": "latest", "command": "python"},
    {"tool": "rust", "channel": "stable", "command": "rustc"},
    {"tool": "go", "channel": "latest", "command": "go", "version_args": ["version"]},
]


# ── Language packages ───────────────────────────────────────────

NPM_PACKAGES: list[str] = [
    "typescript",
    "ts-node",
    "nodemon",
    "create-react-app",
    "create-next-app",
    "shadcn-ui",
]

PIP_PACKAGES: list[str] = [
    "poetry",
    "virtualenv",
    "pipenv",
    "flask",
    "django",
    "fastapi",
]


# ── Optional components ─────────────────────────────────────────

# Keys are the numbers shown in the selection prompt.
DATABASES: dict[str, dict] = {
    "1": {
        "key": "postgresql",
        "label": "PostgreSQL",
        "probe": "psql",
        "package": {
            "name": "postgresql",
            "names": {
                "apt": ["postgresql", "postgresql-contrib"],
                "dnf": ["postgresql-server", "postgresql-contrib"],
                "pacman": "postgresql",
            },
        },
        "default_service": "postgresql",
    },
    "2": {
        "key": "mongodb",
        "label": "MongoDB",
        "probe": "mongod",
        "package": {"name": "mongodb-org", "names": {"apt": "mongodb-org"}},
        "default_service": "mongod",
        "apt_only": True,
    },
    "3": {
        "key": "redis",
        "label": "Redis",
        "probe": "redis-server",
        "package": {"name": "redis"},
        "default_service": "redis",
        "services": {"apt": "redis-server"},
    },
    "4": {
        "key": "mysql",
        "label": "MySQL",
        "probe": "mysql",
        "package": {
            "name": "mysql-server",
            "names": {"apt": "mysql-server", "dnf": "mysql-server", "pacman": "mariadb"},
        },
        "default_service": "mysql",
        "services": {"dnf": "mysqld", "pacman": "mariadb"},
    },
}

DOCKER: dict = {
    "key": "docker",
    "label": "Docker",
    "probe": "docker",
    "package": {
        "name": "docker-ce",
        "names": {
            "apt": [
                "docker-ce",
                "docker-ce-cli",
                "containerd.io",
                "docker-buildx-plugin",
                "docker-compose-plugin",
                "docker-ce-rootless-extras",
            ],
        },
    },
    "default_service": "docker",
    "apt_only": True,
}

# Third-party apt repositories needed before the apt-only components.
APT_REPOSITORIES: dict[str, dict] = {
    "mongodb": {
        "key_url": "https://www.mongodb.org/static/pgp/server-6.0.asc",
        "keyring": "/usr/share/keyrings/mongodb-server-6.0.gpg",
        "list_file": "/etc/apt/sources.list.d/mongodb-org-6.0.list",
        "source": (
            "deb [ arch=amd64,arm64 signed-by={keyring} ] "
            "https://repo.mongodb.org/apt/ubuntu focal/mongodb-org/6.0 multiverse"
        ),
    },
    "docker": {
        "key_url": "https://download.docker.com/linux/ubuntu/gpg",
        "keyring": "/usr/share/keyrings/docker-archive-keyring.gpg",
        "list_file": "/etc/apt/sources.list.d/docker.list",
        "source": (
            "deb [arch={dpkg_arch} signed-by={keyring}] "
            "https://download.docker.com/linux/ubuntu {codename} stable"
        ),
    },
}

DOCKER_DAEMON_FILE = "/etc/docker/daemon.json"
DOCKER_DAEMON_CONFIG: dict = {
    "log-driver": "local",
    "log-opts": {"max-size": "10m", "max-file": "5"},
}


# ── Post-install ────────────────────────────────────────────────

CONFIG_DIRS: list[str] = [
    "~/.config/lazygit",
    "~/.config/lazydocker",
]

# (label, command) pairs printed at the end of the tools pipeline.
VERIFY_COMMANDS: list[tuple[str, list[str]]] = [
    ("Node.js", ["node", "--version"]),
    ("Python", ["python", "--version"]),
    ("Rust", ["rustc", "--version"]),
    ("Go", ["go", "version"]),
    ("Lazygit", ["lazygit", "--version"]),
    ("Lazydocker", ["lazydocker", "--version"]),
]


# ── Shell pipeline ──────────────────────────────────────────────

SHELL_PREREQUISITES: list[dict] = [
    {"name": "git"},
    {"name": "unzip"},
    {"name": "curl"},
    {"name": "eza"},
    {"name": "fzf"},
    {"name": "bat"},
    {"name": "fd", "names": {"apt": "fd-find", "dnf": "fd-find", "pacman": "fd"}},
]

ZSH_PACKAGE: dict = {"name": "zsh", "command": "zsh"}

OH_MY_POSH_INSTALL_URL = "https://ohmyposh.dev/install.sh"
POSH_THEME = "night-owl"
POSH_THEME_DIR = "~/.poshthemes"
POSH_THEME_URL = (
    "https://github.com/JanDeDobbeleer/oh-my-posh/raw/main/themes/{theme}.omp.json"
)

ZSH_PLUGIN_DIR = "~/.zsh"
ZSH_PLUGINS: dict[str, str] = {
    "zsh-autosuggestions": "https://github.com/zsh-users/zsh-autosuggestions.git",
    "zsh-syntax-highlighting": "https://github.com/zsh-users/zsh-syntax-highlighting.git",
}
