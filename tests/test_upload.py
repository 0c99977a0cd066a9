"""Tests for the multi-server upload orchestrator."""

import hashlib
import threading

import pytest

import blossom.upload
from blossom.exceptions import NoServersConfiguredError, SigningError, TransferCancelledError, UploadError
from blossom.upload import upload_to_servers
from common.types import OutcomeStatus, ServerConfig, TransferAsset


def make_assets(paths):
    return [TransferAsset(path=str(p), mime_type='text/plain', name=p.name) for p in paths]


def server_config(server, max_upload_size=10 * 1024 * 1024):
    return ServerConfig(url=server.url, max_upload_size=max_upload_size)


def test_uploads_every_asset_to_every_server(network, client, signer, multiple_sample_files):
    servers = [network.add('a.test'), network.add('b.test')]
    assets = make_assets(multiple_sample_files)

    outcomes = upload_to_servers([server_config(s) for s in servers], assets, signer, client=client)

    assert len(outcomes) == 6
    assert all(o.status is OutcomeStatus.UPLOADED for o in outcomes)
    for server in servers:
        assert len(server.blobs) == 3
    # Server order first, then asset order.
    assert [(o.server.url, o.asset.name) for o in outcomes] == [
        (s.url, a.name) for s in servers for a in assets
    ]


def test_failing_server_does_not_abort_batch(network, client, signer, multiple_sample_files):
    ok_a = network.add('a.test')
    broken = network.add('b.test', upload_status=500)
    ok_c = network.add('c.test')
    assets = make_assets(multiple_sample_files[:2])
    errors = []

    outcomes = upload_to_servers(
        [server_config(s) for s in (ok_a, broken, ok_c)],
        assets,
        signer,
        on_error=errors.append,
        client=client
    )

    failed = [o for o in outcomes if o.status is OutcomeStatus.FAILED]
    assert len(outcomes) == 6
    assert len(failed) == 2
    assert errors == failed
    assert all(o.server.url == broken.url for o in failed)
    assert all(isinstance(o.error, UploadError) for o in failed)
    assert not any(o.success for o in failed)
    assert len(ok_a.blobs) == 2
    assert len(ok_c.blobs) == 2


def test_unreachable_server_is_reported(network, client, signer, sample_file):
    online = network.add('a.test')
    servers = [ServerConfig(url='http://offline.test', max_upload_size=1024), server_config(online)]

    outcomes = upload_to_servers(servers, make_assets([sample_file]), signer, client=client)

    assert [o.status for o in outcomes] == [OutcomeStatus.FAILED, OutcomeStatus.UPLOADED]


def test_timed_out_server_is_a_failed_outcome(network, client, signer, sample_file):
    slow = network.add('slow.test', stalled=True)
    online = network.add('a.test')
    errors = []

    outcomes = upload_to_servers(
        [server_config(slow), server_config(online)],
        make_assets([sample_file]),
        signer,
        on_error=errors.append,
        client=client
    )

    assert [o.status for o in outcomes] == [OutcomeStatus.FAILED, OutcomeStatus.UPLOADED]
    assert errors == [outcomes[0]]
    assert isinstance(outcomes[0].error, UploadError)
    assert slow.methods() == ['HEAD', 'PUT']


def test_oversized_asset_never_reaches_network(network, client, signer, tmp_path):
    small_server = network.add('small.test')
    big_server = network.add('big.test')
    large = tmp_path / 'large.bin'
    large.write_bytes(b'0' * 2048)

    outcomes = upload_to_servers(
        [server_config(small_server, 1024), server_config(big_server, 4096)],
        make_assets([large]),
        signer,
        client=client
    )

    assert [o.status for o in outcomes] == [OutcomeStatus.SKIPPED, OutcomeStatus.UPLOADED]
    assert outcomes[0].error is None
    assert small_server.requests == []
    assert len(big_server.blobs) == 1


def test_existing_blob_is_not_uploaded_again(network, client, signer, sample_file):
    server = network.add('a.test')
    sha256 = server.add_blob(sample_file.read_bytes())

    outcomes = upload_to_servers([server_config(server)], make_assets([sample_file]), signer, client=client)

    outcome = outcomes[0]
    assert outcome.status is OutcomeStatus.DEDUPLICATED
    assert outcome.success
    assert outcome.descriptor.sha256 == sha256
    assert outcome.descriptor.size == sample_file.stat().st_size
    assert outcome.descriptor.url == f"{server.url}/{sha256}"
    assert server.methods() == ['HEAD']


def test_inconclusive_probe_still_uploads(network, client, signer, sample_file):
    server = network.add('a.test', head_status=500)

    outcomes = upload_to_servers([server_config(server)], make_assets([sample_file]), signer, client=client)

    assert outcomes[0].status is OutcomeStatus.UPLOADED
    assert server.methods() == ['HEAD', 'PUT']


def test_hash_computed_once_and_shared(network, client, signer, sample_file, monkeypatch):
    servers = [network.add('a.test'), network.add('b.test')]
    calls = []
    original = blossom.upload.compute_file_sha256

    def counting_hash(path):
        calls.append(path)
        return original(path)

    monkeypatch.setattr(blossom.upload, 'compute_file_sha256', counting_hash)

    outcomes = upload_to_servers([server_config(s) for s in servers], make_assets([sample_file]), signer, client=client)

    expected = hashlib.sha256(sample_file.read_bytes()).hexdigest()
    assert len(calls) == 1
    assert all(o.asset.sha256 == expected for o in outcomes)
    assert all(o.descriptor.sha256 == expected for o in outcomes)


def test_precomputed_hash_is_used(network, client, signer, sample_file, monkeypatch):
    server = network.add('a.test')
    sha256 = hashlib.sha256(sample_file.read_bytes()).hexdigest()
    monkeypatch.setattr(blossom.upload, 'compute_file_sha256', lambda path: pytest.fail('hashed again'))
    asset = TransferAsset(path=str(sample_file), mime_type='text/plain', name='test.txt', sha256=sha256)

    outcomes = upload_to_servers([server_config(server)], [asset], signer, client=client)

    assert outcomes[0].status is OutcomeStatus.UPLOADED


def test_missing_file_is_a_failed_outcome(network, client, signer, tmp_path, sample_file):
    server = network.add('a.test')
    assets = make_assets([tmp_path / 'missing.txt', sample_file])

    outcomes = upload_to_servers([server_config(server)], assets, signer, client=client)

    assert [o.status for o in outcomes] == [OutcomeStatus.FAILED, OutcomeStatus.UPLOADED]
    assert isinstance(outcomes[0].error, OSError)


def test_progress_attributed_to_server_and_asset(network, client, signer, sample_file):
    servers = [network.add('a.test'), network.add('b.test')]
    reports = []

    upload_to_servers(
        [server_config(s) for s in servers],
        make_assets([sample_file]),
        signer,
        on_progress=lambda server, asset, percent, speed: reports.append((server.url, asset.name, percent)),
        client=client
    )

    for server in servers:
        percents = [p for url, name, p in reports if url == server.url]
        assert percents == sorted(percents)
        assert percents[-1] == 100.0
    assert {name for _, name, _ in reports} == {'test.txt'}


def test_no_servers_is_configuration_error(client, signer, sample_file):
    with pytest.raises(NoServersConfiguredError):
        upload_to_servers([], make_assets([sample_file]), signer, client=client)


def test_signing_error_aborts_call(network, client, sample_file):
    class BrokenSigner:
        def sign(self, event):
            raise SigningError("key locked")

    server = network.add('a.test')

    with pytest.raises(SigningError):
        upload_to_servers([server_config(server)], make_assets([sample_file]), BrokenSigner(), client=client)
    assert 'PUT' not in server.methods()


def test_cancellation_stops_batch(network, client, signer, multiple_sample_files):
    servers = [network.add('a.test'), network.add('b.test')]
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(TransferCancelledError):
        upload_to_servers(
            [server_config(s) for s in servers],
            make_assets(multiple_sample_files),
            signer,
            client=client,
            cancel_event=cancel
        )
    assert servers[1].requests == []
