import numpy as np
import pytest

from autodrive.network import NeuralNetwork
from autodrive.road import Road
from autodrive.runtime import SimulationConfig, SimulationSession
from autodrive.simulation import Simulation, WorldConfig
from autodrive.vehicle import DriverKind

# Six narrow lanes so neighbouring vehicles overlap sideways.
CRASH_WORLD = dict(
    road_width=120.0,
    lane_count=6,
    agent_lane=2,
    agent_y=100.0,
    traffic=((3, 100.0),),
)


def test_road_lanes_and_borders() -> None:
    road = Road(100.0, 180.0, lane_count=3)
    assert road.left == 10.0
    assert road.right == 190.0
    assert road.lane_center(0) == pytest.approx(40.0)
    assert road.lane_center(1) == pytest.approx(100.0)
    assert road.lane_center(2) == pytest.approx(160.0)
    assert road.lane_divider_xs() == pytest.approx([70.0, 130.0])
    (top_left, bottom_left), (top_right, bottom_right) = road.borders
    assert top_left[0] == bottom_left[0] == 10.0
    assert top_right[0] == bottom_right[0] == 190.0
    assert top_left[1] < -1e6 and bottom_left[1] > 1e6


def test_lane_index_is_clamped() -> None:
    road = Road(100.0, 180.0, lane_count=3)
    assert road.lane_center(7) == road.lane_center(2)
    assert road.lane_center(-3) == road.lane_center(0)


def test_road_rejects_invalid_geometry() -> None:
    with pytest.raises(ValueError):
        Road(0.0, 0.0)
    with pytest.raises(ValueError):
        Road(0.0, 100.0, lane_count=0)


def test_default_world_layout() -> None:
    simulation = Simulation(rng=np.random.default_rng(0))
    assert len(simulation.agents) == 1
    assert len(simulation.traffic) == 1
    agent = simulation.agents[0]
    assert agent.kind is DriverKind.NETWORK
    assert agent.center == (100.0, 100.0)
    assert simulation.traffic[0].center == (100.0, -100.0)


def test_traffic_drives_up_the_road() -> None:
    simulation = Simulation(rng=np.random.default_rng(0))
    for _ in range(20):
        simulation.step()
    assert simulation.step_index == 20
    assert simulation.traffic[0].y < -100.0
    assert not simulation.traffic[0].collided


def test_agents_ignore_each_other() -> None:
    simulation = Simulation(WorldConfig(agent_count=3), rng=np.random.default_rng(0))
    simulation.step()
    assert simulation.active_agent_count() == 3


def test_overlapping_agent_and_traffic_collide() -> None:
    simulation = Simulation(WorldConfig(**CRASH_WORLD), rng=np.random.default_rng(0))
    simulation.step()
    assert simulation.agents[0].collided
    assert simulation.traffic[0].collided
    assert simulation.all_collided()


def test_traffic_can_ignore_agents() -> None:
    world = WorldConfig(traffic_sees_agents=False, **CRASH_WORLD)
    simulation = Simulation(world, rng=np.random.default_rng(0))
    simulation.step()
    assert simulation.agents[0].collided
    assert not simulation.traffic[0].collided


def test_best_agent_has_smallest_y() -> None:
    simulation = Simulation(WorldConfig(agent_count=3), rng=np.random.default_rng(0))
    simulation.agents[1].y = 50.0
    simulation.agents[2].y = 80.0
    assert simulation.best_agent_index() == 1
    assert simulation.best_agent() is simulation.agents[1]
    assert simulation.fitness(simulation.agents[1]) == pytest.approx(50.0)


def test_given_networks_are_used() -> None:
    rng = np.random.default_rng(2)
    networks = [NeuralNetwork.random((5, 6, 4), rng) for _ in range(2)]
    simulation = Simulation(networks=networks, rng=rng)
    assert [agent.network for agent in simulation.agents] == networks


def test_empty_network_list_is_rejected() -> None:
    with pytest.raises(ValueError):
        Simulation(networks=[])


def test_refresh_sensors_reads_without_moving() -> None:
    simulation = Simulation(rng=np.random.default_rng(0))
    agent = simulation.agents[0]
    assert agent.sensor.readings == ()
    simulation.refresh_sensors()
    assert len(agent.sensor.readings) == 5
    assert agent.center == (100.0, 100.0)
    assert simulation.step_index == 0


def test_snapshot_describes_frame() -> None:
    simulation = Simulation(WorldConfig(agent_count=2), rng=np.random.default_rng(0))
    simulation.step()
    snapshot = simulation.snapshot()
    assert snapshot.step_index == 1
    assert len(snapshot.agents) == 2
    assert len(snapshot.traffic) == 1
    assert snapshot.lane_dividers == pytest.approx((70.0, 130.0))
    assert snapshot.best_agent is snapshot.agents[snapshot.best_index]
    assert snapshot.agents[0].network is not None
    assert snapshot.traffic[0].network is None
    assert snapshot.traffic[0].kind == "traffic"


def test_manual_session_follows_keys() -> None:
    world = WorldConfig(agent_driver=DriverKind.MANUAL)
    session = SimulationSession(world, rng=np.random.default_rng(0))
    agent = session.simulation.agents[0]
    assert agent.kind is DriverKind.MANUAL

    session.step({"up"})
    assert agent.speed == pytest.approx(0.15)
    assert agent.y == pytest.approx(99.85)

    session.step(set())
    assert agent.controls.forward == 0.0


def test_network_session_ignores_keys() -> None:
    session = SimulationSession(rng=np.random.default_rng(0))
    session.step({"up"})
    assert session.simulation.agents[0].y == 100.0


def test_session_run_stops_at_step_budget() -> None:
    session = SimulationSession(
        config=SimulationConfig(max_steps=5), rng=np.random.default_rng(0)
    )
    snapshot = session.run()
    assert snapshot.step_index == 5
    assert session.finished


def test_session_run_stops_when_everyone_crashed() -> None:
    session = SimulationSession(
        WorldConfig(**CRASH_WORLD),
        config=SimulationConfig(max_steps=100),
        rng=np.random.default_rng(0),
    )
    snapshot = session.run()
    assert snapshot.step_index == 1


def test_session_reset_starts_new_generation() -> None:
    session = SimulationSession(rng=np.random.default_rng(0))
    session.step()
    network = NeuralNetwork.random((5, 6, 4), np.random.default_rng(1))
    snapshot = session.reset([network, network.clone()])
    assert snapshot.step_index == 0
    assert len(session.simulation.agents) == 2
    assert session.simulation.agents[0].network is network


def test_vehicles_sense_from_their_new_position() -> None:
    world = WorldConfig(agent_driver=DriverKind.MANUAL)
    simulation = Simulation(world, rng=np.random.default_rng(0))
    agent = simulation.agents[0]
    agent.controls.forward = 1.0

    simulation.step()

    assert agent.y < world.agent_y
    assert len(agent.sensor.rays) == 5
    for start, _ in agent.sensor.rays:
        assert start == agent.center
