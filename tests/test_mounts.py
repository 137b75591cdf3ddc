"""Tests for mount table and volume daemon config parsing."""

from segmerge.storage.mounts import (
    intersect_mounts,
    read_mount_points,
    read_vold_mount_points,
)

PREFIXES = ['/dev/block/vold/', '/dev/block//vold/']

MOUNT_TABLE = """\
rootfs / rootfs ro,relatime 0 0
/dev/block/platform/msm_sdcc.1/by-name/system /system ext4 ro,relatime 0 0
/dev/block/vold/179:1 /mnt/sdcard vfat rw,dirsync,nosuid,nodev 0 0
/dev/block//vold/179:9 /mnt/extSdCard vfat rw,dirsync 0 0
/dev/block/vold/8:1 /mnt/usbdisk vfat rw 0 0
/dev/block/vold/bad
"""

VOLD_FSTAB = """\
## Vold 2.0 fstab

dev_mount sdcard /mnt/sdcard auto /devices/platform/msm_sdcc.1/mmc_host
  dev_mount extsd /mnt/extSdCard:auto auto /devices/platform/msm_sdcc.3
dev_mount broken
mount_point /mnt/usbdisk
discard = enable
"""


def test_read_mount_points_seeds_default(tmp_path):
    """Test that the default path comes first and is not repeated."""
    table = tmp_path / 'mounts'
    table.write_text(MOUNT_TABLE)

    mounts = read_mount_points(str(table), PREFIXES, '/mnt/sdcard')

    assert mounts == ['/mnt/sdcard', '/mnt/extSdCard', '/mnt/usbdisk']


def test_read_mount_points_missing_table(tmp_path):
    mounts = read_mount_points(str(tmp_path / 'absent'), PREFIXES, '/sdcard')

    assert mounts == ['/sdcard']


def test_read_vold_dev_mount_and_mount_point(tmp_path):
    """Test both recognized line kinds, including ':' truncation."""
    fstab = tmp_path / 'vold.fstab'
    fstab.write_text(VOLD_FSTAB)

    vold = read_vold_mount_points([str(fstab)], '/mnt/sdcard')

    assert vold == ['/mnt/sdcard', '/mnt/extSdCard', '/mnt/usbdisk']


def test_read_vold_falls_back_to_secondary_file(tmp_path):
    conf = tmp_path / 'vold.conf'
    conf.write_text('mount_point /mnt/emmc\n')

    vold = read_vold_mount_points(
        [str(tmp_path / 'vold.fstab'), str(conf)], '/sdcard'
    )

    assert vold == ['/sdcard', '/mnt/emmc']


def test_read_vold_unreadable_returns_none(tmp_path):
    assert read_vold_mount_points([str(tmp_path / 'a'), str(tmp_path / 'b')], '/x') is None


def test_intersect_keeps_mount_order():
    mounts = ['/sdcard', '/mnt/a', '/mnt/b', '/mnt/c']
    vold = ['/sdcard', '/mnt/c', '/mnt/a']

    assert intersect_mounts(mounts, vold) == ['/sdcard', '/mnt/a', '/mnt/c']


def test_intersect_without_vold_keeps_everything():
    assert intersect_mounts(['/sdcard', '/mnt/a'], None) == ['/sdcard', '/mnt/a']
