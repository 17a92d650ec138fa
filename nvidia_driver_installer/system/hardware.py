"""GPU hardware and kernel driver detection

Read-only probes built on lspci and lsmod. They never raise: a command that
cannot be run is reported as ProbeStatus.QUERY_FAILED so callers can tell
"nothing there" apart from "could not look".
"""

from dataclasses import dataclass
from enum import Enum

from ..utils.logging import log_info, log_warn

TARGET_DRIVER = "nvidia"
CONFLICTING_DRIVER = "nouveau"

# Companion modules of the proprietary driver. Other modules that merely
# contain the name (i2c_nvidia_gpu, nvidia_wmi_ec_backlight) ship with the
# stock kernel and load alongside nouveau.
TARGET_DRIVER_COMPANIONS = ("drm", "modeset", "uvm", "peermem")

# PCI class codes (lspci -n) for display controllers
CLASS_DISPLAY_VGA = "0300"
CLASS_DISPLAY_3D = "0302"


class ProbeStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    QUERY_FAILED = "query_failed"


class DeviceClass(Enum):
    VGA = "vga"
    THREE_D = "3d"
    OTHER = "other"

    @classmethod
    def from_class_code(cls, code: str) -> "DeviceClass":
        code = code.strip().rstrip(":").lower()
        if code == CLASS_DISPLAY_VGA:
            return cls.VGA
        if code == CLASS_DISPLAY_3D:
            return cls.THREE_D
        return cls.OTHER


@dataclass(frozen=True)
class GpuDevice:
    bus_address: str
    description: str
    vendor_match: bool
    device_class: DeviceClass

    @property
    def qualifies(self) -> bool:
        """Only a vendor VGA/3D controller counts; audio or USB functions on
        the same card do not."""
        return self.vendor_match and self.device_class in (DeviceClass.VGA, DeviceClass.THREE_D)


@dataclass(frozen=True)
class HardwareInventory:
    status: ProbeStatus
    devices: tuple[GpuDevice, ...] = ()
    rejected: tuple[GpuDevice, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.devices


@dataclass(frozen=True)
class DriverState:
    status: ProbeStatus
    target_driver_loaded: bool = False
    conflicting_driver_loaded: bool = False
    conflicting_driver_modules: tuple[str, ...] = ()


def _parse_class_code(output: str, bus_address: str) -> str:
    # e.g. "01:00.0 0300: 10de:1c82 (rev a1)"
    for line in output.splitlines():
        parts = line.split()
        if len(parts) >= 2 and parts[0] == bus_address:
            return parts[1]
    return ""


def scan_hardware(runner, vendor: str = TARGET_DRIVER) -> HardwareInventory:
    """Find the vendor's display controllers.

    First pass matches the vendor name in ``lspci`` descriptions; second pass
    re-queries each candidate's numeric class code and keeps only VGA (0300)
    and 3D (0302) controllers.
    """
    listing = runner.run(["lspci"])
    if not listing.ok:
        log_warn(f"Unable to list PCI devices (lspci exit code {listing.returncode})")
        return HardwareInventory(ProbeStatus.QUERY_FAILED)

    candidates = []
    for line in listing.stdout.splitlines():
        if vendor.lower() in line.lower() and line.split():
            candidates.append((line.split()[0], line.strip()))

    accepted = []
    rejected = []
    for bus_address, description in candidates:
        detail = runner.run(["lspci", "-n", "-s", bus_address])
        class_code = _parse_class_code(detail.stdout, bus_address) if detail.ok else ""
        device = GpuDevice(bus_address, description, True, DeviceClass.from_class_code(class_code))
        if device.qualifies:
            log_info(f"found {vendor} VGA/GPU device:")
            log_info(f"..... {description}")
            accepted.append(device)
        else:
            rejected.append(device)

    if not candidates:
        log_warn(f"unable to find any {vendor} devices. "
                 f"(Hint: find such manually using: 'lspci | grep -i {vendor}')")
    elif not accepted:
        log_warn(f"unable to find {vendor} VGA/GPU devices, only: "
                 + ", ".join(d.description for d in rejected))

    status = ProbeStatus.FOUND if accepted else ProbeStatus.NOT_FOUND
    return HardwareInventory(status, tuple(accepted), tuple(rejected))


def _is_target_module(name: str, target: str) -> bool:
    if name == target:
        return True
    return any(name == f"{target}_{suffix}" for suffix in TARGET_DRIVER_COMPANIONS)


def scan_loaded_drivers(runner, target: str = TARGET_DRIVER,
                        conflicting: str = CONFLICTING_DRIVER) -> DriverState:
    """Check the loaded kernel modules for the target and conflicting drivers."""
    result = runner.run(["lsmod"])
    if not result.ok:
        log_warn(f"Unable to list kernel modules (lsmod exit code {result.returncode})")
        return DriverState(ProbeStatus.QUERY_FAILED)

    target_loaded = False
    conflicting_modules = []
    for line in result.stdout.splitlines():
        parts = line.split()
        if not parts or parts[0] == "Module":
            continue
        name = parts[0].lower()
        if _is_target_module(name, target.lower()):
            target_loaded = True
        if conflicting.lower() in name:
            conflicting_modules.append(parts[0])

    found = target_loaded or bool(conflicting_modules)
    return DriverState(
        ProbeStatus.FOUND if found else ProbeStatus.NOT_FOUND,
        target_driver_loaded=target_loaded,
        conflicting_driver_loaded=bool(conflicting_modules),
        conflicting_driver_modules=tuple(conflicting_modules),
    )
